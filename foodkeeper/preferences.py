"""Reminder preferences, persisted and observable."""

from __future__ import annotations

from .db.preferences import PreferencesDB
from .errors import ValidationError
from .events import PREFERENCES_CHANGED, EventBus

DAY_OPTIONS = (1, 2, 3, 5, 7)
DEFAULT_DAYS_BEFORE = 3
DEFAULT_NOTIFY_ON_DAY = True


class Preferences:
    """User-facing reminder settings.

    Every write is persisted immediately and announced on the bus as
    ``preferences.changed`` with ``{"key": ..., "value": ...}``.
    """

    def __init__(self, db: PreferencesDB, bus: EventBus) -> None:
        self._db = db
        self._bus = bus

    def _set(self, key: str, value) -> None:
        if self._db.get(key) == value:
            return
        self._db.set(key, value)
        self._bus.publish(PREFERENCES_CHANGED, {"key": key, "value": value})

    @property
    def days_before_notification(self) -> int:
        return self._db.get("days_before_notification", DEFAULT_DAYS_BEFORE)

    @days_before_notification.setter
    def days_before_notification(self, days: int) -> None:
        if type(days) is not int or days not in DAY_OPTIONS:
            options = ", ".join(str(d) for d in DAY_OPTIONS)
            raise ValidationError(f"days_before_notification must be one of {options}, got {days!r}")
        self._set("days_before_notification", days)

    @property
    def notify_on_expiration_day(self) -> bool:
        return self._db.get("notify_on_expiration_day", DEFAULT_NOTIFY_ON_DAY)

    @notify_on_expiration_day.setter
    def notify_on_expiration_day(self, enabled: bool) -> None:
        self._set("notify_on_expiration_day", bool(enabled))

    @property
    def notifications_authorized(self) -> bool:
        """Whether the user has allowed reminders. Unset means not yet asked."""
        return self._db.get("notifications_authorized", False)

    @notifications_authorized.setter
    def notifications_authorized(self, granted: bool) -> None:
        self._set("notifications_authorized", bool(granted))

    def as_dict(self) -> dict:
        return {
            "days_before_notification": self.days_before_notification,
            "notify_on_expiration_day": self.notify_on_expiration_day,
            "notifications_authorized": self.notifications_authorized,
        }
