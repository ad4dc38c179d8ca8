"""Calculator shell composing the entry buffer, tracker, evaluator and formatter.

``Calculator`` is the single owner of the calculator aggregate.  Each key
handler mutates it in place and completes before returning; nothing here
blocks or schedules work.  The subscription gate is not consulted here,
see ``session.CalculatorSession``.
"""
from __future__ import annotations

from loguru import logger

from contract import validate_state, ValidationReport
from entry import DEFAULT_MAX_LENGTH, EntryBuffer
from evaluator import Operator
from formatter import format_number
from models import (
    CalculatorState,
    CalculatorView,
    Key,
    KeyPress,
    OPERATOR_KEYS,
)
from tracker import OperationTracker


class InvalidStateError(Exception):
    """Raised when a snapshot violates the state rules."""

    def __init__(self, report: ValidationReport) -> None:
        self.report = report
        super().__init__(report.summary())


class Calculator:
    """Four-function calculator with left-to-right operator chaining."""

    def __init__(self, max_entry_length: int = DEFAULT_MAX_LENGTH) -> None:
        self.entry = EntryBuffer(max_length=max_entry_length)
        self.tracker = OperationTracker(self.entry)

    # -- input surface ------------------------------------------------------

    def digit(self, d: str) -> None:
        self.entry.append_digit(d)

    def decimal_point(self) -> None:
        self.entry.append_decimal_point()

    def operator(self, op: Operator | str) -> None:
        op = Operator(op)
        chaining = self.tracker.is_pending
        left = self.tracker.begin_or_chain(op, self.entry.current_value())
        if chaining:
            # The intermediate result becomes the displayed value.
            self.entry.load(left)

    def equals(self) -> None:
        applied = self.tracker.is_pending
        result = self.tracker.finalize(self.entry.current_value())
        if applied:
            self.entry.load(result)
            logger.debug("equals -> {}", self.entry.text)

    def clear_all(self) -> None:
        self.entry.reset()
        self.tracker.clear()

    def clear_entry(self) -> None:
        self.entry.backspace_or_clear_entry()

    def percent(self) -> None:
        self.entry.percent()

    def toggle_sign(self) -> None:
        self.entry.negate()

    def press(self, key: Key | str, value: str | None = None) -> None:
        """Dispatch a button press by key name."""
        key = Key(key)
        if key == Key.DIGIT:
            if value is None:
                raise ValueError("digit key requires a value")
            self.digit(value)
        elif key in OPERATOR_KEYS:
            self.operator(OPERATOR_KEYS[key])
        else:
            self._ACTIONS[key](self)

    _ACTIONS = {
        Key.DECIMAL: decimal_point,
        Key.EQUALS: equals,
        Key.CLEAR: clear_all,
        Key.CLEAR_ENTRY: clear_entry,
        Key.PERCENT: percent,
        Key.TOGGLE_SIGN: toggle_sign,
    }

    # -- output surface -----------------------------------------------------

    @property
    def display(self) -> str:
        return format_number(self.entry.current_value())

    @property
    def pending_symbol(self) -> str | None:
        op = self.tracker.pending_operator
        return op.symbol if op is not None else None

    @property
    def expression(self) -> str:
        """Secondary line: the left operand and pending operator, or ``"0"``."""
        if not self.tracker.is_pending:
            return "0"
        left = format_number(self.tracker.pending_left_operand)
        return f"{left} {self.pending_symbol}"

    def view(self) -> CalculatorView:
        return CalculatorView(
            display=self.display,
            expression=self.expression,
            pending_operator=self.pending_symbol,
            awaiting_fresh_entry=self.entry.awaiting_fresh_entry,
        )

    # -- snapshots ----------------------------------------------------------

    def capture_state(self) -> CalculatorState:
        return CalculatorState(
            entry_text=self.entry.text,
            pending_left_operand=self.tracker.pending_left_operand,
            pending_operator=self.tracker.pending_operator,
            awaiting_fresh_entry=self.entry.awaiting_fresh_entry,
        )

    def restore_state(self, state: CalculatorState) -> None:
        """Replace the whole aggregate with ``state``.

        Raises InvalidStateError, leaving the calculator untouched, when the
        snapshot breaks a state rule.
        """
        report = validate_state(state)
        if not report.passed:
            raise InvalidStateError(report)

        self.entry.text = state.entry_text
        self.entry.awaiting_fresh_entry = state.awaiting_fresh_entry
        self.tracker.pending_left_operand = state.pending_left_operand
        self.tracker.pending_operator = state.pending_operator
