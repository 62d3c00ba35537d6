"""Key/value storage for user preferences."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from .schema import ensure_schema


class PreferencesDB:
    """Manages the preferences table. Values are stored as JSON text."""

    def __init__(self, db_path: str | Path = "~/.config/foodkeeper/foodkeeper.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get(self, key: str, default: Any = None) -> Any:
        row = self._get_conn().execute(
            "SELECT value FROM preferences WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return default
        return json.loads(row["value"])

    def set(self, key: str, value: Any) -> None:
        conn = self._get_conn()
        conn.execute(
            """INSERT INTO preferences (key, value) VALUES (?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
            (key, json.dumps(value)),
        )
        conn.commit()

