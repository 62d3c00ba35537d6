"""SQLite persistence for food items, grocery items and preferences."""

from .preferences import PreferencesDB
from .schema import ensure_schema
from .store import DEFAULT_DB_PATH, ItemStore

__all__ = [
    "DEFAULT_DB_PATH",
    "ItemStore",
    "PreferencesDB",
    "ensure_schema",
]
