from __future__ import annotations

import threading
import weakref
from typing import Any, Callable, Optional

from .kv import KeyValueStore

Row = dict[str, Any]


class LocalCollection:
    """One entity collection persisted as a JSON array under a single key.

    Every mutation is a read-entire-collection / modify / write-entire-collection
    cycle performed under a lock shared by all collections on the same store.
    Callers only ever receive copies.
    """

    _locks: "weakref.WeakKeyDictionary[Any, threading.RLock]" = weakref.WeakKeyDictionary()
    _locks_guard = threading.Lock()

    def __init__(self, store: KeyValueStore, key: str):
        self._store = store
        self._key = key
        with LocalCollection._locks_guard:
            self._lock = LocalCollection._locks.setdefault(store, threading.RLock())

    @property
    def key(self) -> str:
        return self._key

    def all(self) -> list[Row]:
        with self._lock:
            rows = self._store.get(self._key, [])
            return [dict(r) for r in rows] if isinstance(rows, list) else []

    def find(self, predicate: Callable[[Row], bool]) -> list[Row]:
        return [r for r in self.all() if predicate(r)]

    def get(self, row_id: str) -> Optional[Row]:
        for r in self.all():
            if r.get("id") == row_id:
                return r
        return None

    def upsert(self, row: Row) -> bool:
        """Insert or replace by id. Returns True when the row was new."""
        with self._lock:
            rows = self.all()
            for i, r in enumerate(rows):
                if r.get("id") == row["id"]:
                    rows[i] = dict(row)
                    self._store.set(self._key, rows)
                    return False
            rows.append(dict(row))
            self._store.set(self._key, rows)
            return True

    def delete_where(self, predicate: Callable[[Row], bool]) -> int:
        with self._lock:
            rows = self.all()
            kept = [r for r in rows if not predicate(r)]
            removed = len(rows) - len(kept)
            if removed:
                self._store.set(self._key, kept)
            return removed

    def replace_all(self, rows: list[Row]) -> None:
        """Swap in a whole snapshot in one write."""
        with self._lock:
            self._store.set(self._key, [dict(r) for r in rows])
