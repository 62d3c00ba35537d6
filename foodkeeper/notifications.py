"""Keeps expiry reminders in step with the food item lifecycle.

Each item owns two reminder slots, ``{id}-warning`` (N days before) and
``{id}-expiry`` (on the day). Any edit of the expiration date, status
change away from active, or deletion must go through :meth:`cancel`;
creation and date edits of active items follow up with :meth:`schedule`.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING, Callable, Iterable

from .models import FoodItem
from .reminders import Reminder

if TYPE_CHECKING:
    from .preferences import Preferences
    from .reminders import ReminderService

logger = logging.getLogger(__name__)


def reminder_ids(item: FoodItem) -> tuple[str, str]:
    return (f"{item.id}-warning", f"{item.id}-expiry")


def _warning_text(name: str, days_before: int) -> tuple[str, str]:
    if days_before == 1:
        return ("Food Expiring Tomorrow", f"{name} expires tomorrow.")
    return ("Food Expiring Soon", f"{name} expires in {days_before} days.")


def plan_reminders(
    item: FoodItem,
    days_before: int,
    notify_on_day: bool,
    now: datetime,
    at: time = time(9, 0),
) -> list[Reminder]:
    """Reminders *item* should have armed at *now*.

    Slots whose fire time is not strictly in the future are left out.
    """
    if not item.is_active:
        return []

    warning_id, expiry_id = reminder_ids(item)
    reminders: list[Reminder] = []

    if days_before > 0:
        fire_at = datetime.combine(item.expiration_date - timedelta(days=days_before), at)
        if fire_at > now:
            title, body = _warning_text(item.name, days_before)
            reminders.append(Reminder(warning_id, fire_at, title, body))

    if notify_on_day:
        fire_at = datetime.combine(item.expiration_date, at)
        if fire_at > now:
            reminders.append(
                Reminder(
                    expiry_id,
                    fire_at,
                    "Food Expires Today!",
                    f"{item.name} expires today. Use it or lose it!",
                )
            )

    return reminders


class NotificationScheduler:
    """Maps item lifecycle events onto a :class:`ReminderService`.

    Calls into the service are fire-and-forget: inside a running event loop
    they are queued with ``call_soon``, otherwise made inline. Failures are
    logged and never reach the caller.
    """

    def __init__(
        self,
        service: ReminderService,
        preferences: Preferences,
        *,
        at: time = time(9, 0),
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._service = service
        self._preferences = preferences
        self._at = at
        self._clock = clock

    def schedule(self, item: FoodItem) -> list[Reminder]:
        """Arm the reminders for an active item.

        Returns:
            The reminders dispatched (empty when unauthorized or inactive).
        """
        if not self._service.is_authorized():
            return []

        reminders = plan_reminders(
            item,
            self._preferences.days_before_notification,
            self._preferences.notify_on_expiration_day,
            self._clock(),
            self._at,
        )
        for r in reminders:
            self._dispatch(self._service.arm, r.id, r.fire_at, r.title, r.body)
        return reminders

    def cancel(self, item: FoodItem) -> None:
        self._dispatch(self._service.disarm, list(reminder_ids(item)))

    def reschedule(self, item: FoodItem) -> list[Reminder]:
        self.cancel(item)
        return self.schedule(item)

    def resync(self, items: Iterable[FoodItem]) -> int:
        """Reschedule every item; returns the number of reminders armed.

        While unauthorized nothing is touched: revoking permission leaves
        already-armed reminders in place.
        """
        if not self._service.is_authorized():
            return 0
        return sum(len(self.reschedule(item)) for item in items)

    def prune(self, active_items: Iterable[FoodItem]) -> int:
        """Disarm reminders that belong to no item in *active_items*.

        Catches items used, discarded or deleted by another process, whose
        cancel never reached this service.

        Returns:
            Number of reminders disarmed.
        """
        keep = {rid for item in active_items for rid in reminder_ids(item)}
        try:
            stale = [r.id for r in self._service.pending() if r.id not in keep]
        except Exception:
            logger.exception("Could not list pending reminders")
            return 0
        if stale:
            logger.info("Disarming %d stale reminder(s)", len(stale))
            self._dispatch(self._service.disarm, stale)
        return len(stale)

    def cancel_all(self) -> None:
        try:
            ids = [r.id for r in self._service.pending()]
        except Exception:
            logger.exception("Could not list pending reminders")
            return
        self._dispatch(self._service.disarm, ids)

    def _dispatch(self, fn: Callable, *args) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._call(fn, *args)
        else:
            loop.call_soon(self._call, fn, *args)

    @staticmethod
    def _call(fn: Callable, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("Reminder service call %s failed", getattr(fn, "__name__", fn))
