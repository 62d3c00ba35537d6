"""Tests for shopping list reconciliation."""

from datetime import timedelta

from foodkeeper.events import FOOD_CHANGED
from foodkeeper.grocery_sync import GroceryReconciler, admissions, evictions
from foodkeeper.models import GroceryItem, ItemStatus


def _names(store):
    return [(g.name, g.is_completed) for g in store.query_grocery_items()]


class TestAdmissions:
    def test_safe_full_item_not_admitted(self, make_item, today):
        assert admissions([make_item("Milk", days=7)], [], today) == []

    def test_warning_item_admitted(self, make_item, today):
        assert admissions([make_item("Milk", days=2)], [], today) == ["Milk"]

    def test_expired_item_admitted(self, make_item, today):
        assert admissions([make_item("Chicken", days=-1)], [], today) == ["Chicken"]

    def test_low_item_admitted(self, make_item, today):
        assert admissions([make_item("Rice", days=60, remaining=0.29)], [], today) == ["Rice"]

    def test_threshold_is_exclusive(self, make_item, today):
        assert admissions([make_item("Rice", days=60, remaining=0.3)], [], today) == []

    def test_inactive_items_ignored(self, make_item, today):
        item = make_item("Milk", days=-3, status=ItemStatus.USED)
        assert admissions([item], [], today) == []

    def test_existing_entry_blocks_admission(self, make_item, today):
        existing = [GroceryItem(name="  milk ", is_completed=True)]
        assert admissions([make_item("Milk", days=1)], existing, today) == []

    def test_same_name_admitted_once_per_pass(self, make_item, today):
        items = [make_item("Milk", days=1), make_item(" MILK ", days=-2)]
        assert admissions(items, [], today) == ["Milk"]

    def test_name_is_trimmed(self, make_item, today):
        assert admissions([make_item("  Eggs  ", days=0)], [], today) == ["Eggs"]

    def test_blank_name_never_admitted(self, make_item, today):
        assert admissions([make_item("   ", days=0)], [], today) == []


class TestEvictions:
    def test_healthy_match_evicted(self, make_item, today):
        grocery = GroceryItem(name="milk")
        assert evictions([make_item("Milk", days=7)], [grocery], today) == [grocery]

    def test_completed_entry_kept(self, make_item, today):
        grocery = GroceryItem(name="milk", is_completed=True)
        assert evictions([make_item("Milk", days=7)], [grocery], today) == []

    def test_unmatched_entry_kept(self, make_item, today):
        assert evictions([make_item("Milk", days=7)], [GroceryItem(name="Bread")], today) == []

    def test_unhealthy_match_kept(self, make_item, today):
        grocery = GroceryItem(name="Milk")
        assert evictions([make_item("Milk", days=3)], [grocery], today) == []
        assert evictions([make_item("Milk", days=9, remaining=0.1)], [grocery], today) == []

    def test_inactive_match_kept(self, make_item, today):
        grocery = GroceryItem(name="Milk")
        food = make_item("Milk", days=9, status=ItemStatus.DISCARDED)
        assert evictions([food], [grocery], today) == []

    def test_first_active_item_wins_name_collision(self, make_item, today):
        grocery = GroceryItem(name="Milk")
        healthy, expiring = make_item("Milk", days=9), make_item("Milk", days=1)
        assert evictions([healthy, expiring], [grocery], today) == [grocery]
        assert evictions([expiring, healthy], [grocery], today) == []


class TestGroceryReconciler:
    def test_scenario_expiring_milk_admitted(self, store, make_item, today):
        store.insert(make_item("Milk", days=2))
        result = GroceryReconciler(store).reconcile(today)

        assert [g.name for g in result.added] == ["Milk"]
        assert _names(store) == [("Milk", False)]

    def test_scenario_safe_milk_not_admitted(self, store, make_item, today):
        store.insert(make_item("Milk", days=7))
        result = GroceryReconciler(store).reconcile(today)
        assert not result.changed
        assert _names(store) == []

    def test_admission_is_idempotent(self, store, make_item, today):
        store.insert(make_item("Milk", days=2))
        store.insert(make_item("Chicken", days=-1))
        reconciler = GroceryReconciler(store)

        reconciler.reconcile(today)
        second = reconciler.reconcile(today)

        assert not second.changed
        assert sorted(_names(store)) == [("Chicken", False), ("Milk", False)]

    def test_scenario_refilled_milk_evicted(self, store, make_item, today):
        store.insert(GroceryItem(name="milk"))
        food = store.insert(make_item("Milk", days=2, remaining=0.1))
        reconciler = GroceryReconciler(store)
        assert not reconciler.reconcile(today).changed

        store.update(food, remaining_amount=1.0, expiration_date=today + timedelta(days=10))
        result = reconciler.reconcile(today)

        assert [g.name for g in result.removed] == ["milk"]
        assert _names(store) == []

    def test_completed_entries_never_deleted(self, store, make_item, today):
        store.insert(GroceryItem(name="Milk", is_completed=True))
        store.insert(make_item("Milk", days=30))

        GroceryReconciler(store).reconcile(today)

        assert _names(store) == [("Milk", True)]

    def test_entry_survives_after_item_is_used(self, store, make_item, today):
        food = store.insert(make_item("Milk", days=1))
        reconciler = GroceryReconciler(store)
        reconciler.reconcile(today)

        store.update(food, status=ItemStatus.USED)
        reconciler.reconcile(today)

        assert _names(store) == [("Milk", False)]

    def test_user_entry_for_unknown_food_is_kept(self, store, today):
        store.insert(GroceryItem(name="Coffee"))
        GroceryReconciler(store).reconcile(today)
        assert _names(store) == [("Coffee", False)]

    def test_attach_runs_on_inventory_change(self, store, bus, make_item):
        reconciler = GroceryReconciler(store)
        reconciler.attach(bus)

        store.insert(make_item("Bread", days=0))
        assert _names(store) == [("Bread", False)]

        reconciler.detach(bus)
        store.insert(make_item("Jam", days=0))
        assert _names(store) == [("Bread", False)]

    def test_grocery_changes_do_not_trigger_a_pass(self, store, bus, make_item):
        calls = []
        reconciler = GroceryReconciler(store)
        reconciler.attach(bus)
        bus.subscribe(FOOD_CHANGED, lambda name, payload: calls.append(name))

        store.insert(GroceryItem(name="Coffee"))
        assert calls == []
