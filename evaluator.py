"""Binary arithmetic for the calculator.

``evaluate`` is a pure function of its three arguments.  Callers always
supply both operands; nothing here reads calculator state.

Branches: EVAL-ADD, EVAL-SUB, EVAL-MUL, EVAL-DIV, EVAL-DIV-ZERO
"""
from __future__ import annotations

from enum import Enum


class Operator(str, Enum):
    """The four binary operators, keyed by their action name."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    Operator.ADD: "+",
    Operator.SUBTRACT: "−",
    Operator.MULTIPLY: "×",
    Operator.DIVIDE: "÷",
}


def evaluate(left: float, right: float, operator: Operator) -> float:
    """Return ``left <operator> right``.

    Division by zero yields ``0.0`` rather than raising or producing a
    non-finite value.
    """
    if operator == Operator.ADD:                                  # EVAL-ADD
        return left + right
    if operator == Operator.SUBTRACT:                             # EVAL-SUB
        return left - right
    if operator == Operator.MULTIPLY:                             # EVAL-MUL
        return left * right
    if operator == Operator.DIVIDE:
        if right == 0:                                            # EVAL-DIV-ZERO
            return 0.0
        return left / right                                       # EVAL-DIV
    raise ValueError(f"unknown operator: {operator!r}")
