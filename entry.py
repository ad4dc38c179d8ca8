"""Entry buffer: the numeral the user is currently typing.

The buffer only ever holds text matching ``-?\\d*\\.?\\d*`` with at most one
decimal point, so ``current_value()`` always parses.  Every mutation below
preserves that.

Branches: ENTRY-FRESH, ENTRY-ZERO, ENTRY-APPEND, ENTRY-FULL,
          DEC-PRESENT, DEC-APPEND, BACK-DROP, BACK-RESET
"""
from __future__ import annotations

import math

from formatter import plain_numeral

DEFAULT_TEXT = "0"
DEFAULT_MAX_LENGTH = 64
# Longer digit runs can parse past the float range.
MAX_LENGTH_LIMIT = 300

DIGITS = frozenset("0123456789")


class EntryBuffer:
    """Owns ``entry_text`` and ``awaiting_fresh_entry``."""

    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH) -> None:
        if not 1 <= max_length <= MAX_LENGTH_LIMIT:
            raise ValueError(
                f"max_length must be between 1 and {MAX_LENGTH_LIMIT}, got {max_length}"
            )
        self.max_length = max_length
        self.text = DEFAULT_TEXT
        self.awaiting_fresh_entry = False

    # -- typing ---------------------------------------------------------------

    def append_digit(self, digit: str) -> None:
        if digit not in DIGITS:
            raise ValueError(f"digit must be one of 0-9, got {digit!r}")

        if self.awaiting_fresh_entry:                             # ENTRY-FRESH
            self.text = digit
            self.awaiting_fresh_entry = False
        elif self.text == DEFAULT_TEXT:                           # ENTRY-ZERO
            self.text = digit
        elif len(self.text) >= self.max_length:                   # ENTRY-FULL
            return
        else:                                                     # ENTRY-APPEND
            self.text += digit

    def append_decimal_point(self) -> None:
        if "." in self.text:                                      # DEC-PRESENT
            return
        self.text += "."                                          # DEC-APPEND

    def backspace_or_clear_entry(self) -> None:
        if len(self.text) > 1:                                    # BACK-DROP
            self.text = self.text[:-1]
            if self.text == "-":
                self.text = DEFAULT_TEXT
        else:                                                     # BACK-RESET
            self.text = DEFAULT_TEXT

    # -- value transforms -----------------------------------------------------

    def negate(self) -> None:
        self.load(-self.current_value())

    def percent(self) -> None:
        self.load(self.current_value() / 100)

    def load(self, value: float) -> None:
        """Replace the text with a computed value.

        Non-finite values (e.g. a product that overflowed) become ``"0"``.
        """
        self.text = plain_numeral(value)

    def reset(self) -> None:
        self.text = DEFAULT_TEXT
        self.awaiting_fresh_entry = False

    # -- reading --------------------------------------------------------------

    def current_value(self) -> float:
        value = float(self.text)
        return value if math.isfinite(value) else 0.0

    def __repr__(self) -> str:
        return (
            f"EntryBuffer(text={self.text!r}, "
            f"awaiting_fresh_entry={self.awaiting_fresh_entry})"
        )
