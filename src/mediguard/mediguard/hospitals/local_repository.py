from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import HOSPITALS_KEY, HOSPITALS_TABLE
from ..storage.collection import LocalCollection
from ..storage.kv import KeyValueStore
from ..sync.replicator import CloudReplicator
from .model import Hospital
from .repository import HospitalRepository


class LocalHospitalRepository(HospitalRepository):
    """Local-first hospital storage; writes are replicated best-effort."""

    def __init__(self, store: KeyValueStore, replicator: Optional[CloudReplicator] = None):
        self._rows = LocalCollection(store, HOSPITALS_KEY)
        self._replicator = replicator or CloudReplicator()

    @property
    def collection(self) -> LocalCollection:
        return self._rows

    def list_all(self) -> Sequence[Hospital]:
        return [Hospital.from_row(r) for r in self._rows.all()]

    def get_by_id(self, hospital_id: str) -> Optional[Hospital]:
        row = self._rows.get(hospital_id)
        return Hospital.from_row(row) if row else None

    def get_by_username(self, username: str) -> Optional[Hospital]:
        for r in self._rows.find(lambda r: r.get("loginUsername") == username):
            return Hospital.from_row(r)
        return None

    def save(self, hospital: Hospital) -> None:
        row = hospital.to_row()
        self._rows.upsert(row)
        self._replicator.upsert(HOSPITALS_TABLE, row)

    def delete_by_id(self, hospital_id: str) -> bool:
        removed = self._rows.delete_where(lambda r: r.get("id") == hospital_id)
        self._replicator.delete(HOSPITALS_TABLE, hospital_id)
        return removed > 0
