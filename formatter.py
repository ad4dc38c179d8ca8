"""Display formatting for calculator values.

Two paths:

- integral values are shown with thousands grouping and no decimal point
- everything else is rounded to ``SIGNIFICANT_DIGITS`` significant digits,
  trailing zeros dropped, and shown ungrouped (unless the rounding lands on
  an integer, which is then grouped)

Output never uses exponent notation.  Non-finite input renders as ``"0"``.
"""
from __future__ import annotations

import math
from decimal import Decimal

SIGNIFICANT_DIGITS = 12


def parse_numeral(text: str) -> float:
    """Parse a numeral string, returning NaN when it is not a number.

    Thousands separators are accepted so display text parses back.
    """
    try:
        return float(text.replace(",", ""))
    except ValueError:
        return math.nan


def plain_numeral(value: float) -> str:
    """Shortest round-tripping text for ``value`` in plain decimal notation.

    ``-0.0`` and integral values drop the fractional part.
    """
    if not math.isfinite(value):
        return "0"
    if float(value).is_integer():
        return str(int(value))
    # repr() is the shortest round-trip form but may carry an exponent.
    return format(Decimal(repr(value)), "f")


def format_number(value: float | str) -> str:
    """Render a value for the main display."""
    if isinstance(value, str):
        value = parse_numeral(value)
    value = float(value)

    if not math.isfinite(value):
        return "0"

    if value % 1 == 0:
        return f"{int(value):,}"

    rounded = float(f"{value:.{SIGNIFICANT_DIGITS}g}")
    if rounded % 1 == 0:
        # Rounding noise away can land on an integer; group it like one so
        # the text formats back to itself.
        return f"{int(rounded):,}"
    return plain_numeral(rounded)
