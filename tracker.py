"""Operation tracker: the pending operator and its left operand.

Operators chain strictly left to right.  When an operator is pressed while
another is pending, the pending one is applied immediately and its result
becomes the new left operand, so ``10 - 2 * 3`` is ``(10 - 2) * 3``.

The tracker never writes display text.  ``begin_or_chain`` returns the left
operand it ended up with and the caller decides what to show.

Branches: CHAIN-BEGIN, CHAIN-APPLY, FINAL-APPLY, FINAL-NOOP, OVF-ZERO
"""
from __future__ import annotations

import math

from loguru import logger

from entry import EntryBuffer
from evaluator import Operator, evaluate


class OperationTracker:
    """Owns ``pending_left_operand`` and ``pending_operator``.

    Both are ``None`` together or set together.
    """

    def __init__(self, entry: EntryBuffer) -> None:
        self._entry = entry
        self.pending_left_operand: float | None = None
        self.pending_operator: Operator | None = None

    @property
    def is_pending(self) -> bool:
        return self.pending_operator is not None

    def _apply(self, current_value: float) -> float:
        """Evaluate the pending operation; overflow resolves to zero."""
        result = evaluate(
            self.pending_left_operand, current_value, self.pending_operator
        )
        if not math.isfinite(result):                             # OVF-ZERO
            logger.warning(
                "{} {} {} overflowed, using 0",
                self.pending_left_operand,
                self.pending_operator.symbol,
                current_value,
            )
            return 0.0
        return result

    def begin_or_chain(self, next_operator: Operator, current_value: float) -> float:
        """Record ``next_operator``, applying any pending one first."""
        if not self.is_pending:                                   # CHAIN-BEGIN
            self.pending_left_operand = current_value
        else:                                                     # CHAIN-APPLY
            result = self._apply(current_value)
            logger.debug(
                "chained {} {} {} = {}",
                self.pending_left_operand,
                self.pending_operator.symbol,
                current_value,
                result,
            )
            self.pending_left_operand = result

        self.pending_operator = Operator(next_operator)
        self._entry.awaiting_fresh_entry = True
        return self.pending_left_operand

    def finalize(self, current_value: float) -> float:
        """Apply the pending operator, if any, and clear the tracker."""
        if not self.is_pending:                                   # FINAL-NOOP
            return current_value

        result = self._apply(current_value)                       # FINAL-APPLY
        self.clear()
        self._entry.awaiting_fresh_entry = True
        return result

    def clear(self) -> None:
        self.pending_left_operand = None
        self.pending_operator = None
