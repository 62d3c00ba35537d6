"""Data models for food inventory and grocery list entries."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .expiration import ExpirationStatus, days_until, describe, classify

# Below this fraction remaining an item counts as running low.
LOW_STOCK_THRESHOLD = 0.3


class Location(Enum):
    FRIDGE = "fridge"
    FREEZER = "freezer"
    PANTRY = "pantry"


class ItemStatus(Enum):
    ACTIVE = "active"      # still in storage
    USED = "used"          # consumed or cooked
    DISCARDED = "discarded"


def clamp_amount(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def name_key(name: str) -> str:
    """Matching key shared by food and grocery names."""
    return name.strip().lower()


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class FoodItem:
    """A perishable item in the fridge, freezer or pantry."""

    name: str
    location: Location
    expiration_date: date
    notes: str | None = None
    status: ItemStatus = ItemStatus.ACTIVE
    remaining_amount: float = 1.0
    size: str | None = None
    sort_order: int = 0
    id: str = field(default_factory=_new_id)
    date_added: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if isinstance(self.expiration_date, datetime):
            self.expiration_date = self.expiration_date.date()
        self.remaining_amount = clamp_amount(self.remaining_amount)

    @property
    def is_active(self) -> bool:
        return self.status is ItemStatus.ACTIVE

    @property
    def key(self) -> str:
        return name_key(self.name)

    # Urgency is derived from the calendar on every call, never stored.

    def days_until_expiration(self, today: date | None = None) -> int:
        return days_until(self.expiration_date, today)

    def expiration_status(self, today: date | None = None) -> ExpirationStatus:
        return classify(self.days_until_expiration(today))

    def expiration_text(self, today: date | None = None) -> str:
        return describe(self.days_until_expiration(today))

    def is_low(self) -> bool:
        return self.remaining_amount < LOW_STOCK_THRESHOLD

    def needs_restock(self, today: date | None = None) -> bool:
        """Expiring, expired or running low."""
        return self.is_low() or self.expiration_status(today) is not ExpirationStatus.SAFE

    def is_healthy(self, today: date | None = None) -> bool:
        return not self.needs_restock(today)


@dataclass
class GroceryItem:
    """A shopping list entry. Linked to food items by name only."""

    name: str
    is_completed: bool = False
    id: str = field(default_factory=_new_id)
    date_added: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> str:
        return name_key(self.name)
