"""Expiration urgency: whole-day countdown, status and display text."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

# Items expiring within this many days (inclusive) are in the warning band.
WARNING_DAYS = 3


class ExpirationStatus(Enum):
    SAFE = "safe"
    WARNING = "warning"
    EXPIRED = "expired"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ExpirationStatus.SAFE: "Safe to eat",
    ExpirationStatus.WARNING: "Expiring soon",
    ExpirationStatus.EXPIRED: "Expired",
}


def _as_day(value: date | datetime) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(expiration: date | datetime, today: date | datetime | None = None) -> int:
    """Return the number of calendar days from *today* to *expiration*.

    Time of day is ignored on both sides. Negative values mean the item
    expired that many days ago.
    """
    start = _as_day(today) if today is not None else date.today()
    return (_as_day(expiration) - start).days


def classify(days: int) -> ExpirationStatus:
    if days < 0:
        return ExpirationStatus.EXPIRED
    if days <= WARNING_DAYS:
        return ExpirationStatus.WARNING
    return ExpirationStatus.SAFE


def expiration_status(
    expiration: date | datetime, today: date | datetime | None = None
) -> ExpirationStatus:
    return classify(days_until(expiration, today))


def describe(days: int) -> str:
    """Human readable countdown for a *days* value from :func:`days_until`."""
    if days < 0:
        ago = abs(days)
        return "Expired 1 day ago" if ago == 1 else f"Expired {ago} days ago"
    if days == 0:
        return "Expires today"
    if days == 1:
        return "Expires tomorrow"
    return f"Expires in {days} days"


def expiration_text(
    expiration: date | datetime, today: date | datetime | None = None
) -> str:
    return describe(days_until(expiration, today))
