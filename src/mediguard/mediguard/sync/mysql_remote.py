from __future__ import annotations

import logging
from typing import Any, Sequence

import mysql.connector

from ..core.exceptions import RemoteUnreachable
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_columns, fetchall, load_json_columns
from .mapping import FIELD_MAPS, JSON_COLUMNS

logger = logging.getLogger(__name__)

Row = dict[str, Any]


def _columns(table: str) -> list[str]:
    try:
        return [column for _, column in FIELD_MAPS[table]]
    except KeyError:
        raise ValueError(f"Unknown table: {table}") from None


class MySQLRemoteStore:
    """Remote store on a shared MySQL server (self-hosted deployments)."""

    is_configured = True

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def ping(self) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT 1 AS ok")
                cur.fetchall()
            return True
        except mysql.connector.Error as e:
            logger.debug("MySQL ping failed: %s", e)
            return False

    def select_all(self, table: str) -> Sequence[Row]:
        columns = _columns(table)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT {', '.join(columns)} FROM {table}")
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise RemoteUnreachable(f"SELECT {table} failed: {e}") from e
        try:
            return [self._normalize(table, r) for r in rows]
        except ValueError as e:
            raise RemoteUnreachable(f"SELECT {table} returned malformed JSON: {e}") from e

    def _normalize(self, table: str, row: Row) -> Row:
        row = load_json_columns(row, JSON_COLUMNS[table])
        if "flagged" in row and row["flagged"] is not None:
            row["flagged"] = bool(row["flagged"])
        return row

    def upsert(self, table: str, row: Row) -> None:
        columns = _columns(table)
        data = dump_json_columns(row, JSON_COLUMNS[table])
        placeholders = ", ".join(["%s"] * len(columns))
        updates = ", ".join(f"{c}=VALUES({c})" for c in columns if c != "id")
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO {table}({', '.join(columns)}) VALUES({placeholders}) "
                    f"ON DUPLICATE KEY UPDATE {updates}",
                    tuple(data.get(c) for c in columns),
                )
        except mysql.connector.Error as e:
            raise RemoteUnreachable(f"UPSERT {table} failed: {e}") from e

    def delete_by_id(self, table: str, row_id: str) -> None:
        self.delete_where(table, "id", row_id)

    def delete_where(self, table: str, column: str, value: Any) -> None:
        if column not in _columns(table):
            raise ValueError(f"Unknown column {column!r} for {table}")
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"DELETE FROM {table} WHERE {column}=%s", (value,))
        except mysql.connector.Error as e:
            raise RemoteUnreachable(f"DELETE {table} failed: {e}") from e
