"""Row <-> model mapping. Raw enum strings exist only at this boundary."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from enum import Enum
from typing import TypeVar

from ..errors import ValidationError
from ..models import FoodItem, GroceryItem, ItemStatus, Location

E = TypeVar("E", bound=Enum)


def decode_enum(enum_cls: type[E], raw: str) -> E:
    """Map a stored or typed-in string to its enum member (case-insensitive)."""
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Unknown {enum_cls.__name__} {raw!r} (expected one of: {choices})"
        ) from None


def encode_enum(member: Enum) -> str:
    return member.value


def food_from_row(row: sqlite3.Row) -> FoodItem:
    return FoodItem(
        id=row["id"],
        name=row["name"],
        location=decode_enum(Location, row["location"]),
        expiration_date=date.fromisoformat(row["expiration_date"]),
        notes=row["notes"],
        status=decode_enum(ItemStatus, row["status"]),
        date_added=datetime.fromisoformat(row["date_added"]),
        remaining_amount=row["remaining_amount"],
        size=row["size"],
        sort_order=row["sort_order"],
    )


def food_to_row(item: FoodItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "location": encode_enum(item.location),
        "expiration_date": item.expiration_date.isoformat(),
        "notes": item.notes,
        "status": encode_enum(item.status),
        "date_added": item.date_added.isoformat(timespec="microseconds"),
        "remaining_amount": item.remaining_amount,
        "size": item.size,
        "sort_order": item.sort_order,
    }


def grocery_from_row(row: sqlite3.Row) -> GroceryItem:
    return GroceryItem(
        id=row["id"],
        name=row["name"],
        is_completed=bool(row["is_completed"]),
        date_added=datetime.fromisoformat(row["date_added"]),
    )


def grocery_to_row(item: GroceryItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "is_completed": int(item.is_completed),
        "date_added": item.date_added.isoformat(timespec="microseconds"),
    }
