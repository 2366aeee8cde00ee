from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import StaffUser


class UserRepository(Protocol):
    """Repository interface for StaffUser."""

    def list_all(self) -> Sequence[StaffUser]:
        raise NotImplementedError

    def get_by_id(self, user_id: str) -> Optional[StaffUser]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[StaffUser]:
        raise NotImplementedError

    def get_by_bound_device(self, device_id: str) -> Sequence[StaffUser]:
        raise NotImplementedError

    def list_by_hospital(self, hospital_id: str) -> Sequence[StaffUser]:
        raise NotImplementedError

    def save(self, user: StaffUser) -> None:
        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        raise NotImplementedError

    def delete_by_hospital(self, hospital_id: str) -> int:
        raise NotImplementedError
