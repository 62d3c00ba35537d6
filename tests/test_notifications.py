"""Tests for the reminder lifecycle contract."""

import asyncio
from datetime import datetime, time, timedelta

import pytest

from foodkeeper.models import ItemStatus
from foodkeeper.notifications import NotificationScheduler, plan_reminders, reminder_ids


@pytest.fixture
def scheduler(fake_service, prefs, fixed_now):
    return NotificationScheduler(fake_service, prefs, clock=lambda: fixed_now)


def _at_nine(day):
    return datetime.combine(day, time(9, 0))


class TestPlanReminders:
    def test_both_slots(self, make_item, fixed_now):
        item = make_item("Milk", days=7)
        warning, expiry = plan_reminders(item, 3, True, fixed_now)

        assert warning.id == f"{item.id}-warning"
        assert warning.fire_at == _at_nine(item.expiration_date - timedelta(days=3))
        assert warning.title == "Food Expiring Soon"
        assert warning.body == "Milk expires in 3 days."

        assert expiry.id == f"{item.id}-expiry"
        assert expiry.fire_at == _at_nine(item.expiration_date)
        assert expiry.title == "Food Expires Today!"
        assert expiry.body == "Milk expires today. Use it or lose it!"

    def test_one_day_before_wording(self, make_item, fixed_now):
        (warning, _) = plan_reminders(make_item("Eggs", days=7), 1, True, fixed_now)
        assert warning.title == "Food Expiring Tomorrow"
        assert warning.body == "Eggs expires tomorrow."

    def test_past_warning_skipped(self, make_item, fixed_now):
        reminders = plan_reminders(make_item(days=2), 3, True, fixed_now)
        assert [r.id.rsplit("-", 1)[1] for r in reminders] == ["expiry"]

    def test_expiry_later_today_still_armed(self, make_item, fixed_now):
        # fixed_now is 08:00, reminder time 09:00
        reminders = plan_reminders(make_item(days=0), 3, True, fixed_now)
        assert [r.fire_at for r in reminders] == [_at_nine(fixed_now.date())]

    def test_expiry_after_reminder_time_skipped(self, make_item, fixed_now):
        evening = fixed_now.replace(hour=18)
        assert plan_reminders(make_item(days=0), 3, True, evening) == []

    def test_notify_on_day_disabled(self, make_item, fixed_now):
        reminders = plan_reminders(make_item(days=7), 3, False, fixed_now)
        assert [r.id.endswith("-warning") for r in reminders] == [True]

    def test_inactive_item_gets_nothing(self, make_item, fixed_now):
        item = make_item(days=7, status=ItemStatus.USED)
        assert plan_reminders(item, 3, True, fixed_now) == []

    def test_custom_time(self, make_item, fixed_now):
        item = make_item(days=7)
        (_, expiry) = plan_reminders(item, 3, True, fixed_now, at=time(18, 30))
        assert expiry.fire_at == datetime.combine(item.expiration_date, time(18, 30))


class TestNotificationScheduler:
    def test_schedule_arms_both_slots(self, scheduler, fake_service, make_item):
        item = make_item(days=7)
        scheduler.schedule(item)
        assert set(fake_service.armed) == set(reminder_ids(item))

    def test_schedule_uses_preferences(self, scheduler, fake_service, prefs, make_item):
        prefs.days_before_notification = 5
        prefs.notify_on_expiration_day = False
        item = make_item("Ham", days=10)

        scheduler.schedule(item)

        assert list(fake_service.armed) == [f"{item.id}-warning"]
        assert fake_service.armed[f"{item.id}-warning"].body == "Ham expires in 5 days."

    def test_unauthorized_is_silent_noop(self, scheduler, fake_service, make_item):
        fake_service.authorized = False
        assert scheduler.schedule(make_item(days=7)) == []
        assert fake_service.armed == {}

    def test_cancel_clears_both_slots(self, scheduler, fake_service, make_item):
        item = make_item(days=7)
        scheduler.schedule(item)
        scheduler.cancel(item)

        assert fake_service.armed == {}
        assert fake_service.calls[-1] == ("disarm", reminder_ids(item))

    def test_cancel_twice_is_harmless(self, scheduler, fake_service, make_item):
        item = make_item(days=7)
        scheduler.cancel(item)
        scheduler.cancel(item)
        assert fake_service.armed == {}

    def test_reschedule_replaces_fire_time(self, scheduler, fake_service, make_item, today):
        item = make_item(days=7)
        scheduler.schedule(item)

        item.expiration_date = today + timedelta(days=20)
        scheduler.reschedule(item)

        expiry = fake_service.armed[f"{item.id}-expiry"]
        assert expiry.fire_at == _at_nine(today + timedelta(days=20))
        assert len(fake_service.armed) == 2

    def test_resync_counts_armed(self, scheduler, fake_service, make_item):
        items = [make_item("A", days=7), make_item("B", days=1), make_item("C", days=-3)]
        assert scheduler.resync(items) == 3  # A: both, B: expiry only, C: none

    def test_cancel_all(self, scheduler, fake_service, make_item):
        scheduler.resync([make_item("A", days=7), make_item("B", days=8)])
        scheduler.cancel_all()
        assert fake_service.armed == {}

    def test_service_failure_is_logged_not_raised(self, scheduler, fake_service, make_item, caplog):
        def broken(*args):
            raise OSError("daemon down")

        fake_service.arm = broken
        scheduler.schedule(make_item(days=7))

        assert "Reminder service call broken failed" in caplog.text

    def test_dispatch_inside_event_loop_is_deferred(self, scheduler, fake_service, make_item):
        item = make_item(days=7)

        async def run():
            scheduler.schedule(item)
            assert fake_service.armed == {}  # queued, not yet run
            await asyncio.sleep(0)
            return set(fake_service.armed)

        assert asyncio.run(run()) == set(reminder_ids(item))

    def test_resync_while_unauthorized_keeps_armed(self, scheduler, fake_service, make_item):
        item = make_item(days=7)
        scheduler.schedule(item)

        fake_service.authorized = False
        assert scheduler.resync([item]) == 0
        assert set(fake_service.armed) == set(reminder_ids(item))

    def test_prune_disarms_reminders_of_inactive_items(self, scheduler, fake_service, make_item):
        kept, gone = make_item("A", days=7), make_item("B", days=8)
        scheduler.resync([kept, gone])

        assert scheduler.prune([kept]) == 2
        assert set(fake_service.armed) == set(reminder_ids(kept))

    def test_prune_with_nothing_stale(self, scheduler, fake_service, make_item):
        item = make_item(days=7)
        scheduler.schedule(item)
        calls = len(fake_service.calls)

        assert scheduler.prune([item]) == 0
        assert len(fake_service.calls) == calls

    def test_prune_runs_while_unauthorized(self, scheduler, fake_service, make_item):
        item = make_item(days=7)
        scheduler.schedule(item)
        fake_service.authorized = False

        assert scheduler.prune([]) == 2
        assert fake_service.armed == {}
