"""Shared fixtures."""

from datetime import date, datetime, timedelta

import pytest

from foodkeeper.db import ItemStore, PreferencesDB
from foodkeeper.events import EventBus
from foodkeeper.models import FoodItem, Location
from foodkeeper.preferences import Preferences
from foodkeeper.reminders import Reminder, ReminderService


class FakeReminderService(ReminderService):
    """In-memory reminder service recording every call."""

    def __init__(self, authorized: bool = True) -> None:
        self.authorized = authorized
        self.armed: dict[str, Reminder] = {}
        self.calls: list[tuple] = []

    def is_authorized(self) -> bool:
        return self.authorized

    def refresh_authorization(self) -> bool:
        return self.authorized

    async def request_authorization(self) -> bool:
        return self.authorized

    def arm(self, reminder_id, fire_at, title, body) -> None:
        self.calls.append(("arm", reminder_id))
        self.armed[reminder_id] = Reminder(reminder_id, fire_at, title, body)

    def disarm(self, reminder_ids) -> None:
        ids = list(reminder_ids)
        self.calls.append(("disarm", tuple(ids)))
        for reminder_id in ids:
            self.armed.pop(reminder_id, None)

    def pending(self) -> list[Reminder]:
        return sorted(self.armed.values(), key=lambda r: (r.fire_at, r.id))


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store(tmp_path, bus):
    """Create a temporary ItemStore."""
    s = ItemStore(db_path=tmp_path / "test.db", bus=bus)
    yield s
    s.close()


@pytest.fixture
def prefs(tmp_path, bus):
    db = PreferencesDB(db_path=tmp_path / "test.db")
    yield Preferences(db, bus)
    db.close()


@pytest.fixture
def fake_service():
    return FakeReminderService()


@pytest.fixture
def make_item(today):
    """Factory for food items expiring relative to today."""

    def _make(name="Milk", days=7, remaining=1.0, location=Location.FRIDGE, **kwargs):
        return FoodItem(
            name=name,
            location=location,
            expiration_date=today + timedelta(days=days),
            remaining_amount=remaining,
            **kwargs,
        )

    return _make


@pytest.fixture
def fixed_now(today):
    """Eight in the morning today, before the 09:00 reminder time."""
    return datetime.combine(today, datetime.min.time()).replace(hour=8)
