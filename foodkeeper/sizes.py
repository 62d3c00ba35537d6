"""Package size codec: free-form "<quantity> <unit>" strings."""

from __future__ import annotations

import re
from enum import Enum


class SizeUnit(Enum):
    NONE = ""
    OZ = "oz"
    QUART = "quart"
    GAL = "gal"
    LBS = "lbs"
    ML = "ml"
    L = "L"
    LTR = "ltr"
    CUP = "cup"
    PINT = "pint"
    G = "g"
    KG = "kg"


# Case-sensitive: "L" and "l" are not the same token.
_UNITS_BY_TOKEN: dict[str, SizeUnit] = {
    u.value: u for u in SizeUnit if u is not SizeUnit.NONE
}


def lookup_unit(token: str) -> SizeUnit | None:
    """Return the unit for *token*, or None if it is not in the vocabulary."""
    return _UNITS_BY_TOKEN.get(token)


# Plain decimal, optional exponent. No digit separators, nan or inf.
_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(s: str) -> bool:
    return _NUMBER_PATTERN.fullmatch(s) is not None


def parse_size(raw: str | None) -> tuple[str, SizeUnit]:
    """Split a stored size string into (quantity, unit).

    Args:
        raw: e.g. "2 gal", "500 ml", "3", "kg", "half dozen"

    Returns:
        (quantity, unit) tuple. ``("", SizeUnit.NONE)`` for empty input.
        When the second token is not a known unit, only the first token
        survives as the quantity.
    """
    text = (raw or "").strip()
    if not text:
        return ("", SizeUnit.NONE)

    parts = text.split(" ", 1)
    if len(parts) == 2:
        quantity, token = parts[0], parts[1].strip()
        unit = lookup_unit(token)
        return (quantity, unit or SizeUnit.NONE)

    if _is_number(text):
        return (text, SizeUnit.NONE)
    unit = lookup_unit(text)
    if unit is not None:
        return ("", unit)
    return (text, SizeUnit.NONE)


def format_size(quantity: str, unit: SizeUnit) -> str | None:
    """Build the stored size string, or None when there is nothing to record.

    A quantity only counts when it is numeric.
    """
    quantity = quantity.strip()
    has_quantity = bool(quantity) and _is_number(quantity)
    has_unit = unit is not SizeUnit.NONE

    if has_quantity and has_unit:
        return f"{quantity} {unit.value}"
    if has_quantity:
        return quantity
    if has_unit:
        return unit.value
    return None
