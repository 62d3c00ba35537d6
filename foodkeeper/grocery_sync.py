"""Derives the shopping list from inventory urgency.

A reconciliation pass runs in two phases:

1. Admission: every active item that is expiring, expired or running low
   gets a grocery entry, unless an entry with the same name key (lowercased,
   trimmed) already exists, completed or not.
2. Eviction: incomplete grocery entries whose name matches an active item
   that is healthy again are deleted.

Food and grocery items are linked by name only. Entries for items that were
used, discarded or deleted stay until the user checks them off.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from .events import FOOD_CHANGED, PREFERENCES_CHANGED, EventBus
from .models import FoodItem, GroceryItem, name_key

if TYPE_CHECKING:
    from .db.store import ItemStore

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    added: list[GroceryItem] = field(default_factory=list)
    removed: list[GroceryItem] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def admissions(
    food_items: list[FoodItem],
    grocery_items: list[GroceryItem],
    today: date | None = None,
) -> list[str]:
    """Trimmed names that should be added to the grocery list, in order."""
    seen = {g.key for g in grocery_items}
    names: list[str] = []
    for food in food_items:
        if not food.is_active or not food.needs_restock(today):
            continue
        name = food.name.strip()
        key = name.lower()
        if not name or key in seen:
            continue
        seen.add(key)
        names.append(name)
    return names


def evictions(
    food_items: list[FoodItem],
    grocery_items: list[GroceryItem],
    today: date | None = None,
) -> list[GroceryItem]:
    """Incomplete grocery entries whose matching active item is healthy."""
    active_by_key: dict[str, FoodItem] = {}
    for food in food_items:
        if food.is_active:
            # first one wins on a name collision
            active_by_key.setdefault(food.key, food)

    stale: list[GroceryItem] = []
    for grocery in grocery_items:
        if grocery.is_completed:
            continue
        food = active_by_key.get(grocery.key)
        if food is not None and food.is_healthy(today):
            stale.append(grocery)
    return stale


class GroceryReconciler:
    """Runs reconciliation passes against an :class:`ItemStore`."""

    def __init__(self, store: ItemStore) -> None:
        self._store = store
        self._running = False

    def reconcile(self, today: date | None = None) -> SyncResult:
        today = today or date.today()
        result = SyncResult()
        # inserts below publish grocery events only, but guard re-entry anyway
        if self._running:
            return result
        self._running = True
        try:
            food_items = self._store.query_active_food_items()

            groceries = self._store.query_grocery_items()
            for name in admissions(food_items, groceries, today):
                item = self._store.insert(GroceryItem(name=name))
                result.added.append(item)
                logger.info("Added %r to the grocery list", name)

            # eviction works on the list as it was before this pass
            for item in evictions(food_items, groceries, today):
                self._store.delete(item)
                result.removed.append(item)
                logger.info("Removed %r from the grocery list", item.name)
        finally:
            self._running = False
        return result

    def attach(self, bus: EventBus) -> None:
        """Reconcile automatically on inventory and preference changes."""
        bus.subscribe(FOOD_CHANGED, self._on_change)
        bus.subscribe(PREFERENCES_CHANGED, self._on_change)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(FOOD_CHANGED, self._on_change)
        bus.unsubscribe(PREFERENCES_CHANGED, self._on_change)

    def _on_change(self, event_name: str, payload: Any) -> None:
        self.reconcile()
