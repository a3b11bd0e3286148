"""Key-value stores backing the finance state.

Values are opaque strings (the state container writes JSON text). Any object
with ``get`` and ``set`` methods works; the two implementations here cover the
on-disk case and the in-memory case.
"""

from pathlib import Path
from typing import Protocol

from .db import connect


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class SqliteKeyValueStore:
    """Store backed by the ``kv_store`` table created by ``init_db``."""

    def __init__(self, db_path: str | Path):
        self.db_path = db_path

    def get(self, key: str) -> str | None:
        with connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        with connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store(key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )


class MemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
