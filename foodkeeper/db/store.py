"""SQLite-backed store for food items and grocery list entries."""

from __future__ import annotations

import dataclasses
import sqlite3
from pathlib import Path
from typing import Callable, Union

from ..errors import ItemNotFoundError, ValidationError
from ..events import FOOD_CHANGED, GROCERY_CHANGED, EventBus, StoreChange
from ..models import FoodItem, GroceryItem, ItemStatus, Location
from .codec import (
    food_from_row,
    food_to_row,
    grocery_from_row,
    grocery_to_row,
)
from .schema import ensure_schema

Entity = Union[FoodItem, GroceryItem]

DEFAULT_DB_PATH = "~/.config/foodkeeper/foodkeeper.db"

_FOOD_ORDER = "ORDER BY expiration_date, date_added, id"
_GROCERY_ORDER = "ORDER BY date_added, id"
_IMMUTABLE_FIELDS = {"id", "date_added"}


def _table_for(entity: Entity) -> tuple[str, dict, str]:
    if isinstance(entity, FoodItem):
        return "food_items", food_to_row(entity), FOOD_CHANGED
    if isinstance(entity, GroceryItem):
        return "grocery_items", grocery_to_row(entity), GROCERY_CHANGED
    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


class ItemStore:
    """Manages the food_items and grocery_items tables.

    Every successful mutation is published on the event bus after commit.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        bus: EventBus | None = None,
    ) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self.bus = bus or EventBus()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -- mutations --------------------------------------------------------

    def insert(self, entity: Entity) -> Entity:
        table, row, event = _table_for(entity)
        conn = self._get_conn()
        columns = ", ".join(row)
        placeholders = ", ".join(f":{c}" for c in row)
        conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", row)
        conn.commit()
        self.bus.publish(event, StoreChange("insert", entity))
        return entity

    def delete(self, entity: Entity) -> None:
        table, _, event = _table_for(entity)
        conn = self._get_conn()
        cur = conn.execute(f"DELETE FROM {table} WHERE id = ?", (entity.id,))
        conn.commit()
        if cur.rowcount == 0:
            raise ItemNotFoundError(type(entity).__name__, entity.id)
        self.bus.publish(event, StoreChange("delete", entity))

    def update(self, entity: Entity, **fields) -> Entity:
        """Write *fields* to the stored row and to *entity* in place.

        ``remaining_amount`` is clamped to [0, 1]. ``id`` and ``date_added``
        cannot change.

        Raises:
            ValidationError: unknown or immutable field.
            ItemNotFoundError: the entity is not in the store.
        """
        known = {f.name for f in dataclasses.fields(entity)}
        for name in fields:
            if name in _IMMUTABLE_FIELDS:
                raise ValidationError(f"{name} cannot be changed")
            if name not in known:
                raise ValidationError(
                    f"{type(entity).__name__} has no field {name!r}"
                )

        # replace() re-runs __post_init__, which clamps and normalises
        updated = dataclasses.replace(entity, **fields)
        table, row, event = _table_for(updated)
        assignments = ", ".join(f"{c} = :{c}" for c in row if c != "id")

        conn = self._get_conn()
        cur = conn.execute(f"UPDATE {table} SET {assignments} WHERE id = :id", row)
        conn.commit()
        if cur.rowcount == 0:
            raise ItemNotFoundError(type(entity).__name__, entity.id)

        for name in fields:
            setattr(entity, name, getattr(updated, name))
        self.bus.publish(event, StoreChange("update", entity, tuple(fields)))
        return entity

    def reorder(self, items: list[FoodItem]) -> None:
        """Assign dense 0-based sort_order values following list order."""
        conn = self._get_conn()
        with conn:
            for index, item in enumerate(items):
                conn.execute(
                    "UPDATE food_items SET sort_order = ? WHERE id = ?",
                    (index, item.id),
                )
        for index, item in enumerate(items):
            item.sort_order = index
        self.bus.publish(FOOD_CHANGED, StoreChange("reorder", list(items), ("sort_order",)))

    def clear_completed_groceries(self) -> int:
        """Delete every checked-off grocery item.

        Returns:
            Number of rows deleted.
        """
        removed = [g for g in self.query_grocery_items() if g.is_completed]
        conn = self._get_conn()
        with conn:
            for item in removed:
                conn.execute("DELETE FROM grocery_items WHERE id = ?", (item.id,))
        for item in removed:
            self.bus.publish(GROCERY_CHANGED, StoreChange("delete", item))
        return len(removed)

    # -- queries ----------------------------------------------------------

    def get_food_item(self, item_id: str) -> FoodItem:
        row = self._get_conn().execute(
            "SELECT * FROM food_items WHERE id = ?", (item_id,)
        ).fetchone()
        if row is None:
            raise ItemNotFoundError("FoodItem", item_id)
        return food_from_row(row)

    def get_grocery_item(self, item_id: str) -> GroceryItem:
        row = self._get_conn().execute(
            "SELECT * FROM grocery_items WHERE id = ?", (item_id,)
        ).fetchone()
        if row is None:
            raise ItemNotFoundError("GroceryItem", item_id)
        return grocery_from_row(row)

    def query_food_items(
        self, predicate: Callable[[FoodItem], bool] | None = None
    ) -> list[FoodItem]:
        """All food items ordered by expiration date, optionally filtered."""
        rows = self._get_conn().execute(f"SELECT * FROM food_items {_FOOD_ORDER}").fetchall()
        items = [food_from_row(r) for r in rows]
        if predicate is None:
            return items
        return [i for i in items if predicate(i)]

    def query_active_food_items(self, location: Location | None = None) -> list[FoodItem]:
        """Active items ordered by expiration date ascending."""
        sql = "SELECT * FROM food_items WHERE status = ?"
        params: list = [ItemStatus.ACTIVE.value]
        if location is not None:
            sql += " AND location = ?"
            params.append(location.value)
        rows = self._get_conn().execute(f"{sql} {_FOOD_ORDER}", params).fetchall()
        return [food_from_row(r) for r in rows]

    def query_grocery_items(
        self, predicate: Callable[[GroceryItem], bool] | None = None
    ) -> list[GroceryItem]:
        """Grocery items ordered by date added ascending."""
        rows = self._get_conn().execute(
            f"SELECT * FROM grocery_items {_GROCERY_ORDER}"
        ).fetchall()
        items = [grocery_from_row(r) for r in rows]
        if predicate is None:
            return items
        return [i for i in items if predicate(i)]

    def search_food_items(self, text: str) -> list[FoodItem]:
        """Active items whose name or notes contain *text* (case-insensitive)."""
        query = text.strip().lower()
        items = self.query_active_food_items()
        if not query:
            return items
        return [
            i
            for i in items
            if query in i.name.lower() or (i.notes is not None and query in i.notes.lower())
        ]
