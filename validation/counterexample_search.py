"""Counterexample search — discovers gaps in implementation or tests.

This module runs independently of the test suite.  It systematically
searches for:

1. State rule violations: short key sequences (exhaustive) and long ones
   (random) after which the calculator state breaks a rule in
   ``contract.STATE_RULES``.
2. Chain violations: ``a op b op c ... =`` sequences whose display differs
   from an exact left-to-right rational evaluation.
3. Format violations: values whose formatted text has a decimal point when
   integral, or does not survive a parse/format round trip.

Run directly::

    python -m validation.counterexample_search
"""
from __future__ import annotations

import itertools
import math
import random
import sys
from dataclasses import dataclass, field
from fractions import Fraction

from calculator import Calculator
from contract import validate_state
from evaluator import Operator
from formatter import format_number, parse_numeral
from models import Key


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

Press = tuple[Key, "str | None"]


@dataclass
class Counterexample:
    category: str
    inputs: tuple
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category}")
                lines.append(f"      Inputs:   {cx.inputs}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found — all checks passed.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Key alphabet
# ---------------------------------------------------------------------------

KEY_ALPHABET: list[Press] = [
    (Key.DIGIT, "0"),
    (Key.DIGIT, "1"),
    (Key.DIGIT, "5"),
    (Key.DIGIT, "9"),
    (Key.DECIMAL, None),
    (Key.ADD, None),
    (Key.SUBTRACT, None),
    (Key.MULTIPLY, None),
    (Key.DIVIDE, None),
    (Key.EQUALS, None),
    (Key.CLEAR, None),
    (Key.CLEAR_ENTRY, None),
    (Key.PERCENT, None),
    (Key.TOGGLE_SIGN, None),
]

OPERATOR_KEY = {
    Operator.ADD: Key.ADD,
    Operator.SUBTRACT: Key.SUBTRACT,
    Operator.MULTIPLY: Key.MULTIPLY,
    Operator.DIVIDE: Key.DIVIDE,
}


def _label(presses: tuple[Press, ...]) -> tuple[str, ...]:
    return tuple(value if value is not None else key.value for key, value in presses)


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def _check_sequence(presses: tuple[Press, ...]) -> Counterexample | None:
    calc = Calculator()
    for key, value in presses:
        calc.press(key, value)
        report = validate_state(calc.capture_state())
        if not report.passed:
            return Counterexample(
                category="state_rule_violation",
                inputs=_label(presses),
                expected="all state rules hold",
                actual=report.summary(),
                description=f"State after {key.value!r} breaks a rule",
            )
    return None


def search_state_rule_violations(
    max_length: int = 4,
    random_sequences: int = 2_000,
    random_length: int = 30,
    seed: int = 0,
) -> tuple[list[Counterexample], int]:
    """Exhaustive short sequences, then random long ones."""
    cxs: list[Counterexample] = []
    checks = 0

    for length in range(1, max_length + 1):
        for presses in itertools.product(KEY_ALPHABET, repeat=length):
            checks += 1
            cx = _check_sequence(presses)
            if cx is not None:
                cxs.append(cx)

    rng = random.Random(seed)
    for _ in range(random_sequences):
        presses = tuple(rng.choice(KEY_ALPHABET) for _ in range(random_length))
        checks += 1
        cx = _check_sequence(presses)
        if cx is not None:
            cxs.append(cx)

    return cxs, checks


def _exact_chain(operands: list[int], operators: list[Operator]) -> Fraction:
    acc = Fraction(operands[0])
    for op, n in zip(operators, operands[1:]):
        if op == Operator.ADD:
            acc += n
        elif op == Operator.SUBTRACT:
            acc -= n
        elif op == Operator.MULTIPLY:
            acc *= n
        else:
            acc = acc / n if n != 0 else Fraction(0)
    return acc


def search_chain_violations(
    samples: int = 5_000,
    max_terms: int = 5,
    seed: int = 0,
) -> tuple[list[Counterexample], int]:
    """Compare chained results with exact left-to-right evaluation."""
    cxs: list[Counterexample] = []
    checks = 0
    rng = random.Random(seed)

    for _ in range(samples):
        terms = rng.randint(2, max_terms)
        operands = [rng.randint(0, 999) for _ in range(terms)]
        operators = [rng.choice(list(Operator)) for _ in range(terms - 1)]

        calc = Calculator()
        presses: list[Press] = []
        for i, n in enumerate(operands):
            presses.extend((Key.DIGIT, d) for d in str(n))
            if i < len(operators):
                presses.append((OPERATOR_KEY[operators[i]], None))
        presses.append((Key.EQUALS, None))
        for key, value in presses:
            calc.press(key, value)

        checks += 1
        expected = _exact_chain(operands, operators)
        actual = calc.entry.current_value()
        if not math.isclose(actual, float(expected), rel_tol=1e-9, abs_tol=1e-9):
            cxs.append(Counterexample(
                category="chain_violation",
                inputs=_label(tuple(presses)),
                expected=str(float(expected)),
                actual=str(actual),
                description="Chained result differs from left-to-right evaluation",
            ))

    return cxs, checks


def search_format_violations(
    samples: int = 10_000,
    seed: int = 0,
) -> tuple[list[Counterexample], int]:
    """Integral values show no point; formatted text is a fixed point."""
    cxs: list[Counterexample] = []
    checks = 0
    rng = random.Random(seed)

    for _ in range(samples):
        value = rng.choice((
            rng.uniform(-1e6, 1e6),
            float(rng.randint(-10**12, 10**12)),
            rng.randint(-999, 999) / rng.choice((3, 7, 10, 100, 1000)),
        ))
        text = format_number(value)
        checks += 1

        if value.is_integer() and "." in text:
            cxs.append(Counterexample(
                category="format_violation",
                inputs=(value,),
                expected="no decimal point",
                actual=text,
                description="Integral value rendered with a decimal point",
            ))
        elif not value.is_integer():
            again = format_number(parse_numeral(text))
            if again != text:
                cxs.append(Counterexample(
                    category="format_violation",
                    inputs=(value,),
                    expected=text,
                    actual=again,
                    description="Reformatting the formatted text changed it",
                ))

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search() -> SearchReport:
    report = SearchReport()
    for search_fn in (
        search_state_rule_violations,
        search_chain_violations,
        search_format_violations,
    ):
        cxs, checks = search_fn()
        report.counterexamples.extend(cxs)
        report.checks_run += checks
    return report


def main() -> None:
    report = run_search()
    print(report.summary())
    if not report.passed:
        sys.exit(1)


if __name__ == "__main__":
    main()
