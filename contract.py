"""State rules and decision points for the calculator.

Every ``CalculatorState`` the calculator can reach must satisfy
``STATE_RULES``.  The rules are executable predicates, so they double as
the acceptance check for snapshots handed to ``Calculator.restore_state``
and as the oracle for the counterexample search in ``validation/``.

``BRANCHES`` lists every decision point on the key path.  The ids are the
ones annotated in the implementation and used by the white-box tests.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Callable

from models import CalculatorState

NUMERAL_PATTERN = re.compile(r"^-?\d*\.?\d*$")


# ---------------------------------------------------------------------------
# Rule: a named, executable predicate over a state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A named validation rule for calculator states."""

    id: str
    name: str
    description: str
    check: Callable[[CalculatorState], bool]


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------

def _entry_not_empty(s: CalculatorState) -> bool:
    return bool(s.entry_text)


def _entry_is_numeral(s: CalculatorState) -> bool:
    return bool(NUMERAL_PATTERN.match(s.entry_text)) and any(
        c.isdigit() for c in s.entry_text
    )


def _single_decimal_point(s: CalculatorState) -> bool:
    return s.entry_text.count(".") <= 1


def _entry_is_finite(s: CalculatorState) -> bool:
    try:
        return math.isfinite(float(s.entry_text))
    except ValueError:
        return False


def _operator_iff_operand(s: CalculatorState) -> bool:
    return (s.pending_operator is None) == (s.pending_left_operand is None)


def _operand_is_finite(s: CalculatorState) -> bool:
    return s.pending_left_operand is None or math.isfinite(s.pending_left_operand)


STATE_RULES: list[Rule] = [
    Rule(
        id="ST-ENTRY-NONEMPTY",
        name="entry_not_empty",
        description="Entry text must never be empty",
        check=_entry_not_empty,
    ),
    Rule(
        id="ST-ENTRY-NUMERAL",
        name="entry_is_numeral",
        description="Entry text must match -?digits[.digits] with at least one digit",
        check=_entry_is_numeral,
    ),
    Rule(
        id="ST-ENTRY-ONE-POINT",
        name="single_decimal_point",
        description="Entry text may contain at most one decimal point",
        check=_single_decimal_point,
    ),
    Rule(
        id="ST-ENTRY-FINITE",
        name="entry_is_finite",
        description="Entry text must parse to a finite number",
        check=_entry_is_finite,
    ),
    Rule(
        id="ST-PENDING-PAIR",
        name="operator_iff_operand",
        description="Pending operator is set iff pending left operand is set",
        check=_operator_iff_operand,
    ),
    Rule(
        id="ST-OPERAND-FINITE",
        name="operand_is_finite",
        description="Pending left operand, when set, must be finite",
        check=_operand_is_finite,
    ),
]


@dataclass(frozen=True)
class ValidationResult:
    rule_id: str
    rule_name: str
    passed: bool
    description: str


@dataclass(frozen=True)
class ValidationReport:
    results: list[ValidationResult]

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[ValidationResult]:
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        total = len(self.results)
        failed = len(self.failures)
        if failed == 0:
            return f"All {total} rules passed"
        lines = [f"{failed}/{total} rules failed:"]
        for f in self.failures:
            lines.append(f"  [{f.rule_id}] {f.rule_name}: {f.description}")
        return "\n".join(lines)


def validate_state(state: CalculatorState) -> ValidationReport:
    """Run every state rule and return a report."""
    results = []
    for rule in STATE_RULES:
        try:
            passed = rule.check(state)
        except Exception:
            passed = False
        results.append(
            ValidationResult(
                rule_id=rule.id,
                rule_name=rule.name,
                passed=passed,
                description=rule.description,
            )
        )
    return ValidationReport(results=results)


# ---------------------------------------------------------------------------
# Decision points
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BranchSpec:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    component: str      # which component owns the branch


BRANCHES: list[BranchSpec] = [
    # Entry buffer
    BranchSpec("ENTRY-FRESH", "Digit replaces text after operator/equals",
               "awaiting_fresh_entry", "entry"),
    BranchSpec("ENTRY-ZERO", "Digit replaces a lone zero",
               "text == '0'", "entry"),
    BranchSpec("ENTRY-APPEND", "Digit appended to text",
               "text != '0' and len(text) < max_length", "entry"),
    BranchSpec("ENTRY-FULL", "Digit ignored once the entry is full",
               "len(text) >= max_length", "entry"),
    BranchSpec("DEC-PRESENT", "Decimal point ignored when already present",
               "'.' in text", "entry"),
    BranchSpec("DEC-APPEND", "Decimal point appended",
               "'.' not in text", "entry"),
    BranchSpec("BACK-DROP", "Backspace drops the last character",
               "len(text) > 1", "entry"),
    BranchSpec("BACK-RESET", "Backspace resets a single character to '0'",
               "len(text) <= 1", "entry"),
    # Operation tracker
    BranchSpec("CHAIN-BEGIN", "First operator records the left operand",
               "pending_operator is None", "tracker"),
    BranchSpec("CHAIN-APPLY", "Pending operator applied before the next one",
               "pending_operator is not None", "tracker"),
    BranchSpec("FINAL-APPLY", "Equals applies the pending operator",
               "pending_operator is not None", "tracker"),
    BranchSpec("FINAL-NOOP", "Equals with nothing pending keeps the entry",
               "pending_operator is None", "tracker"),
    BranchSpec("OVF-ZERO", "A non-finite result resolves to 0",
               "not isfinite(left OP right)", "tracker"),
    # Evaluator
    BranchSpec("EVAL-ADD", "Addition", "operator == add", "evaluator"),
    BranchSpec("EVAL-SUB", "Subtraction", "operator == subtract", "evaluator"),
    BranchSpec("EVAL-MUL", "Multiplication", "operator == multiply", "evaluator"),
    BranchSpec("EVAL-DIV", "Division by a non-zero divisor",
               "operator == divide and right != 0", "evaluator"),
    BranchSpec("EVAL-DIV-ZERO", "Division by zero yields 0",
               "operator == divide and right == 0", "evaluator"),
    # Shell
    BranchSpec("GATE-ALLOWED", "Equals proceeds when entitled",
               "is_entitled()", "session"),
    BranchSpec("GATE-DENIED", "Equals deferred when not entitled",
               "not is_entitled()", "session"),
]
