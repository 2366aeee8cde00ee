from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import USERS_KEY, USERS_TABLE
from ..storage.collection import LocalCollection
from ..storage.kv import KeyValueStore
from ..sync.replicator import CloudReplicator
from .model import StaffUser
from .repository import UserRepository


class LocalUserRepository(UserRepository):
    def __init__(self, store: KeyValueStore, replicator: Optional[CloudReplicator] = None):
        self._rows = LocalCollection(store, USERS_KEY)
        self._replicator = replicator or CloudReplicator()

    @property
    def collection(self) -> LocalCollection:
        return self._rows

    def list_all(self) -> Sequence[StaffUser]:
        return [StaffUser.from_row(r) for r in self._rows.all()]

    def get_by_id(self, user_id: str) -> Optional[StaffUser]:
        row = self._rows.get(user_id)
        return StaffUser.from_row(row) if row else None

    def get_by_username(self, username: str) -> Optional[StaffUser]:
        for r in self._rows.find(lambda r: r.get("username") == username):
            return StaffUser.from_row(r)
        return None

    def get_by_bound_device(self, device_id: str) -> Sequence[StaffUser]:
        return [StaffUser.from_row(r) for r in self._rows.find(lambda r: r.get("boundDeviceId") == device_id)]

    def list_by_hospital(self, hospital_id: str) -> Sequence[StaffUser]:
        return [StaffUser.from_row(r) for r in self._rows.find(lambda r: r.get("hospitalId") == hospital_id)]

    def save(self, user: StaffUser) -> None:
        row = user.to_row()
        self._rows.upsert(row)
        self._replicator.upsert(USERS_TABLE, row)

    def delete_by_id(self, user_id: str) -> bool:
        removed = self._rows.delete_where(lambda r: r.get("id") == user_id)
        self._replicator.delete(USERS_TABLE, user_id)
        return removed > 0

    def delete_by_hospital(self, hospital_id: str) -> int:
        removed = self._rows.delete_where(lambda r: r.get("hospitalId") == hospital_id)
        self._replicator.delete_where(USERS_TABLE, "hospitalId", hospital_id)
        return removed
