"""Input Coercion: converts loose request values into strict product field types.

Invariants:
    - coerce_price returns a finite float >= 0
    - coerce_stock returns an int >= 0; fractional values are rejected
    - Booleans are never numbers here (JSON true is not 1)
    - Every failure is a ValueError whose message names the field

Design Decisions:
    - Pure functions raising ValueError: pydantic validators wrap them, so a
      failure surfaces as a 400 with field details
"""

import math
from typing import Any


def _to_number(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a valid number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValueError(f"{field} must be a valid number") from None
    raise ValueError(f"{field} must be a valid number")


def coerce_price(value: Any) -> float:
    """Price as a non-negative float. Accepts numbers and numeric strings."""
    price = _to_number(value, "price")
    if not math.isfinite(price):
        raise ValueError("price must be a valid number")
    if price < 0:
        raise ValueError("price must be a valid non-negative number")
    return price


def coerce_stock(value: Any) -> int:
    """Stock as a non-negative int. Accepts ints, integral floats, integer strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        stock = value
    else:
        number = _to_number(value, "stock")
        if not math.isfinite(number):
            raise ValueError("stock must be a valid number")
        if not number.is_integer():
            raise ValueError("stock must be a whole number")
        stock = int(number)
    if stock < 0:
        raise ValueError("stock must be a valid non-negative number")
    return stock


def clean_text(value: Any) -> str | None:
    """Trimmed string, or None when blank. Non-strings are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("must be a string")
    value = value.strip()
    return value or None


def is_blank(value: Any) -> bool:
    """True for the values an update map drops: None, '' and whitespace."""
    return value is None or (isinstance(value, str) and not value.strip())
