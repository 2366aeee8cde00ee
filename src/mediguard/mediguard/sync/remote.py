from __future__ import annotations

from typing import Any, Protocol, Sequence

Row = dict[str, Any]


class RemoteStore(Protocol):
    """Remote tabular store holding hospitals, users and attendance_records.

    Rows use remote (snake_case) column names. Implementations raise
    RemoteUnreachable for network/driver failures.
    """

    @property
    def is_configured(self) -> bool:
        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError

    def select_all(self, table: str) -> Sequence[Row]:
        raise NotImplementedError

    def upsert(self, table: str, row: Row) -> None:
        raise NotImplementedError

    def delete_by_id(self, table: str, row_id: str) -> None:
        raise NotImplementedError

    def delete_where(self, table: str, column: str, value: Any) -> None:
        raise NotImplementedError


class NullRemoteStore:
    """Stand-in used when no remote backend is configured (local mode)."""

    is_configured = False

    def ping(self) -> bool:
        return False

    def select_all(self, table: str) -> Sequence[Row]:
        return []

    def upsert(self, table: str, row: Row) -> None:
        return None

    def delete_by_id(self, table: str, row_id: str) -> None:
        return None

    def delete_where(self, table: str, column: str, value: Any) -> None:
        return None
