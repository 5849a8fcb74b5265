# Rev 0.1.0
"""Scalar normalisation shared by entities and the menu."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from .errors import InvalidArgumentError

TWO_PLACES = Decimal("0.01")
# DECIMAL(7,2) columns: SQLite stores them as REAL, exact only inside this range
MAX_MONEY = Decimal("99999.99")
DIFFICULTY_RANGE = range(1, 6)


def to_money(value, field: str = "value") -> Optional[Decimal]:
    """
    Normalise hours/cost to exactly two places, rounding half-up.
    None and blank text stay None; anything non-numeric or beyond
    MAX_MONEY is rejected.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if isinstance(value, bool):
        raise InvalidArgumentError(f"'{value}' is not a valid decimal number for {field}.")
    try:
        # floats go through str() so 5.1 does not become 5.0999...
        dec = value if isinstance(value, Decimal) else Decimal(str(value))
        if not dec.is_finite():
            raise InvalidOperation
        dec = dec.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise InvalidArgumentError(f"'{value}' is not a valid decimal number for {field}.") from None
    if abs(dec) > MAX_MONEY:
        raise InvalidArgumentError(f"{field.capitalize()} must be between -{MAX_MONEY} and {MAX_MONEY}.")
    return dec


def to_int(value, field: str = "value") -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidArgumentError(f"'{value}' is not a valid number for {field}.")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise InvalidArgumentError(f"'{text}' is not a valid number for {field}.") from None


def check_difficulty(value) -> Optional[int]:
    difficulty = to_int(value, "difficulty")
    if difficulty is not None and difficulty not in DIFFICULTY_RANGE:
        raise InvalidArgumentError("Difficulty must be between 1 and 5.")
    return difficulty


def require_text(value, field: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise InvalidArgumentError(f"{field} is required.")
    return text


def optional_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
