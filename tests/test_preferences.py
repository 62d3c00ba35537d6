"""Tests for persisted, observable reminder preferences."""

import pytest

from foodkeeper.db import PreferencesDB
from foodkeeper.errors import ValidationError
from foodkeeper.events import PREFERENCES_CHANGED, EventBus
from foodkeeper.preferences import Preferences


def test_defaults(prefs):
    assert prefs.days_before_notification == 3
    assert prefs.notify_on_expiration_day is True
    assert prefs.notifications_authorized is False


def test_values_persist(tmp_path):
    db = PreferencesDB(tmp_path / "p.db")
    Preferences(db, EventBus()).days_before_notification = 7
    db.close()

    reopened = PreferencesDB(tmp_path / "p.db")
    assert Preferences(reopened, EventBus()).days_before_notification == 7
    reopened.close()


@pytest.mark.parametrize("days", [0, 4, 10, True, 3.0, "3"])
def test_days_before_must_be_an_option(prefs, days):
    with pytest.raises(ValidationError):
        prefs.days_before_notification = days


def test_change_is_published(prefs, bus):
    received = []
    bus.subscribe(PREFERENCES_CHANGED, lambda name, payload: received.append(payload))

    prefs.notify_on_expiration_day = False
    prefs.notify_on_expiration_day = False  # unchanged, not published again

    assert received == [{"key": "notify_on_expiration_day", "value": False}]


def test_as_dict(prefs):
    prefs.days_before_notification = 5
    assert prefs.as_dict() == {
        "days_before_notification": 5,
        "notify_on_expiration_day": True,
        "notifications_authorized": False,
    }
