from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def dump_json_columns(row: Dict[str, Any], columns: Iterable[str]) -> Dict[str, Any]:
    """Serialize nested objects for JSON/TEXT columns."""
    out = dict(row)
    for c in columns:
        if out.get(c) is not None and not isinstance(out[c], str):
            out[c] = json.dumps(out[c])
    return out


def load_json_columns(row: Dict[str, Any], columns: Iterable[str]) -> Dict[str, Any]:
    """Normalize JSON columns across connector versions (str, bytes or already decoded)."""
    out = dict(row)
    for c in columns:
        value = out.get(c)
        if isinstance(value, (bytes, bytearray)):
            value = value.decode("utf-8")
        if isinstance(value, str):
            value = json.loads(value) if value else None
        out[c] = value
    return out
