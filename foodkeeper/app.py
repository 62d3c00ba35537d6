"""Application object: wires the store, preferences, reminders and grocery sync."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Callable

from .config import FoodKeeperConfig, load_config
from .db import ItemStore, PreferencesDB
from .db.codec import decode_enum
from .errors import ValidationError
from .events import PREFERENCES_CHANGED, EventBus
from .grocery_sync import GroceryReconciler, SyncResult
from .models import FoodItem, GroceryItem, ItemStatus, Location
from .notifications import NotificationScheduler
from .notify import Notifier, create_notifier
from .preferences import Preferences
from .reminders import SchedulerReminderService

logger = logging.getLogger(__name__)

SORT_MODES = ("expiration", "name", "manual")
_EDITABLE_FIELDS = {"name", "location", "expiration_date", "notes", "remaining_amount", "size"}


def _require_name(name: str) -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValidationError("Name must not be empty")
    return trimmed


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    trimmed = notes.strip()
    return trimmed or None


def _coerce_location(value: Location | str) -> Location:
    if isinstance(value, Location):
        return value
    return decode_enum(Location, value)


def _coerce_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)") from None


class FoodKeeper:
    """The food tracker with its derived state kept in sync.

    Use as a context manager, or call :meth:`start` and :meth:`stop`.
    Grocery reconciliation runs after every inventory change while started.
    Reminder work is best effort and never fails the item mutation.
    """

    def __init__(
        self,
        config: FoodKeeperConfig | None = None,
        *,
        notifier: Notifier | None = None,
        prompt: Callable[[], bool] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or load_config()
        db_path = self.config.database.path

        self.bus = EventBus()
        self.store = ItemStore(db_path, bus=self.bus)
        self._prefs_db = PreferencesDB(db_path)
        self.preferences = Preferences(self._prefs_db, self.bus)

        rem = self.config.reminders
        self.reminders = SchedulerReminderService(
            notifier or create_notifier(self.config),
            self.preferences,
            enabled=rem.enabled,
            prompt=prompt,
        )
        self.notifications = NotificationScheduler(
            self.reminders,
            self.preferences,
            at=time(rem.hour, rem.minute),
            clock=clock,
        )
        self.grocery = GroceryReconciler(self.store)
        self._started = False

    # -- lifecycle --------------------------------------------------------

    def start(self) -> None:
        if self._started:
            return
        self.grocery.attach(self.bus)
        self.bus.subscribe(PREFERENCES_CHANGED, self._on_preferences_changed)
        self._started = True
        self.refresh()
        logger.debug("FoodKeeper started (db=%s)", self.config.database.path)

    def stop(self) -> None:
        if not self._started:
            return
        self.grocery.detach(self.bus)
        self.bus.unsubscribe(PREFERENCES_CHANGED, self._on_preferences_changed)
        if self.reminders.scheduler.running:
            self.reminders.scheduler.shutdown(wait=False)
        self.store.close()
        self._prefs_db.close()
        self._started = False

    def __enter__(self) -> FoodKeeper:
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()

    def refresh(self) -> SyncResult:
        """Foreground check: re-arm reminders and reconcile the grocery list.

        A fresh process has nothing armed, and urgency moves with the clock,
        so this runs on start and periodically while watching.
        """
        self.reminders.refresh_authorization()
        items = self.store.query_active_food_items()
        self.notifications.prune(items)
        self.notifications.resync(items)
        return self.sync()

    def sync(self, today: date | None = None) -> SyncResult:
        return self.grocery.reconcile(today)

    def _on_preferences_changed(self, event_name: str, payload: Any) -> None:
        self.reminders.refresh_authorization()
        self.notifications.resync(self.store.query_active_food_items())

    # -- food items -------------------------------------------------------

    def get_item(self, item_id: str) -> FoodItem:
        return self.store.get_food_item(item_id)

    def add_item(
        self,
        name: str,
        location: Location | str,
        expiration_date: date | str,
        notes: str | None = None,
        remaining_amount: float = 1.0,
        size: str | None = None,
    ) -> FoodItem:
        item = FoodItem(
            name=_require_name(name),
            location=_coerce_location(location),
            expiration_date=_coerce_date(expiration_date),
            notes=_clean_notes(notes),
            remaining_amount=remaining_amount,
            size=size or None,
        )
        self.store.insert(item)
        self.notifications.schedule(item)
        logger.info("Added %s to the %s", item.name, item.location.value)
        return item

    def edit_item(self, item_id: str, **fields) -> FoodItem:
        """Change editable fields and re-arm the item's reminders."""
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit: {', '.join(sorted(unknown))}")

        if "name" in fields:
            fields["name"] = _require_name(fields["name"])
        if "location" in fields:
            fields["location"] = _coerce_location(fields["location"])
        if "expiration_date" in fields:
            fields["expiration_date"] = _coerce_date(fields["expiration_date"])
        if "notes" in fields:
            fields["notes"] = _clean_notes(fields["notes"])
        if "size" in fields:
            fields["size"] = fields["size"] or None

        item = self.store.get_food_item(item_id)
        self.store.update(item, **fields)
        self.notifications.reschedule(item)
        return item

    def set_remaining(self, item_id: str, amount: float) -> FoodItem:
        item = self.store.get_food_item(item_id)
        return self.store.update(item, remaining_amount=amount)

    def mark_used(self, item_id: str) -> FoodItem:
        return self._retire(item_id, ItemStatus.USED)

    def mark_discarded(self, item_id: str) -> FoodItem:
        return self._retire(item_id, ItemStatus.DISCARDED)

    def _retire(self, item_id: str, status: ItemStatus) -> FoodItem:
        item = self.store.get_food_item(item_id)
        self.store.update(item, status=status)
        self.notifications.cancel(item)
        logger.info("Marked %s as %s", item.name, status.value)
        return item

    def delete_item(self, item_id: str) -> None:
        item = self.store.get_food_item(item_id)
        self.notifications.cancel(item)
        self.store.delete(item)

    def list_items(
        self, location: Location | str | None = None, sort: str = "expiration"
    ) -> list[FoodItem]:
        """Active items, optionally for one location."""
        if sort not in SORT_MODES:
            raise ValidationError(f"Unknown sort {sort!r} (choose from {', '.join(SORT_MODES)})")
        loc = _coerce_location(location) if location is not None else None
        items = self.store.query_active_food_items(loc)
        if sort == "name":
            items.sort(key=lambda i: i.name.lower())
        elif sort == "manual":
            items.sort(key=lambda i: i.sort_order)
        return items

    def search(self, text: str) -> list[FoodItem]:
        return self.store.search_food_items(text)

    def move_item(self, location: Location | str, from_index: int, to_index: int) -> list[FoodItem]:
        """Move one item within a location's manual order and renumber all of them."""
        items = self.list_items(location, sort="manual")
        if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
            raise ValidationError(
                f"Position out of range (0-{len(items) - 1}): {from_index} -> {to_index}"
            )
        items.insert(to_index, items.pop(from_index))
        self.store.reorder(items)
        return items

    # -- grocery list -----------------------------------------------------

    def grocery_list(self) -> list[GroceryItem]:
        """Incomplete entries first, then completed; each oldest first."""
        items = self.store.query_grocery_items()
        return [g for g in items if not g.is_completed] + [g for g in items if g.is_completed]

    def add_grocery(self, name: str) -> GroceryItem:
        return self.store.insert(GroceryItem(name=_require_name(name)))

    def toggle_grocery(self, item_id: str) -> GroceryItem:
        item = self.store.get_grocery_item(item_id)
        return self.store.update(item, is_completed=not item.is_completed)

    def delete_grocery(self, item_id: str) -> None:
        self.store.delete(self.store.get_grocery_item(item_id))

    def clear_completed(self) -> int:
        return self.store.clear_completed_groceries()

    # -- preferences ------------------------------------------------------

    def set_preferences(
        self,
        days_before: int | None = None,
        notify_on_day: bool | None = None,
    ) -> Preferences:
        if days_before is not None:
            self.preferences.days_before_notification = days_before
        if notify_on_day is not None:
            self.preferences.notify_on_expiration_day = notify_on_day
        return self.preferences

    async def authorize(self) -> bool:
        """Ask for reminder permission; arms reminders when granted."""
        return await self.reminders.request_authorization()
