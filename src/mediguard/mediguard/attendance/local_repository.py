from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import ATTENDANCE_KEY, ATTENDANCE_TABLE
from ..storage.collection import LocalCollection
from ..storage.kv import KeyValueStore
from ..sync.replicator import CloudReplicator
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class LocalAttendanceRepository(AttendanceRepository):
    def __init__(self, store: KeyValueStore, replicator: Optional[CloudReplicator] = None):
        self._rows = LocalCollection(store, ATTENDANCE_KEY)
        self._replicator = replicator or CloudReplicator()

    @property
    def collection(self) -> LocalCollection:
        return self._rows

    def _records(self) -> list[AttendanceRecord]:
        out: list[AttendanceRecord] = []
        for row in self._rows.all():
            try:
                out.append(AttendanceRecord.from_row(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable attendance row %s: %s", row.get("id"), e)
        return out

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        row = self._rows.get(record_id)
        return AttendanceRecord.from_row(row) if row else None

    def get_open_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        for r in self._records():
            if r.user_id == user_id and r.is_open:
                return r
        return None

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        items = [r for r in self._records() if r.user_id == user_id]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return items[: int(limit)]

    def list_for_hospital(
        self,
        hospital_id: str,
        *,
        user_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        out = []
        for r in self._records():
            if r.hospital_id != hospital_id:
                continue
            if user_id is not None and r.user_id != user_id:
                continue
            if start is not None and r.check_in_time < start:
                continue
            if end is not None and r.check_in_time > end:
                continue
            out.append(r)
        out.sort(key=lambda r: r.check_in_time, reverse=True)
        return out

    def save(self, record: AttendanceRecord) -> None:
        row = record.to_row()
        self._rows.upsert(row)
        self._replicator.upsert(ATTENDANCE_TABLE, row)

    def delete_by_hospital(self, hospital_id: str) -> int:
        removed = self._rows.delete_where(lambda r: r.get("hospitalId") == hospital_id)
        self._replicator.delete_where(ATTENDANCE_TABLE, "hospitalId", hospital_id)
        return removed
