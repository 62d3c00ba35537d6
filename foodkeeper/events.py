"""In-process observer bus connecting the store, preferences and sync engine.

Event names:
  food.changed        -> StoreChange for a FoodItem
  grocery.changed     -> StoreChange for a GroceryItem
  preferences.changed -> {"key": str, "value": Any}

Subscribers are callables taking (event_name, payload).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

FOOD_CHANGED = "food.changed"
GROCERY_CHANGED = "grocery.changed"
PREFERENCES_CHANGED = "preferences.changed"

Subscriber = Callable[[str, Any], None]


@dataclass(frozen=True)
class StoreChange:
    action: str  # insert | update | delete | reorder
    entity: Any
    fields: tuple[str, ...] = ()


class EventBus:
    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def subscribe(self, event_name: str, callback: Subscriber) -> None:
        if callback not in self._subscribers[event_name]:
            self._subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: Subscriber) -> None:
        try:
            self._subscribers[event_name].remove(callback)
        except ValueError:
            pass

    def publish(self, event_name: str, payload: Any = None) -> None:
        for cb in list(self._subscribers.get(event_name, [])):
            try:
                cb(event_name, payload)
            except Exception:
                logger.exception("Error delivering %s to %r", event_name, cb)
