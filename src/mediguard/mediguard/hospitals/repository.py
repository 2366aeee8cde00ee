from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Hospital


class HospitalRepository(Protocol):
    """Repository interface for Hospital.

    Services depend on this interface, not on a concrete store.
    """

    def list_all(self) -> Sequence[Hospital]:
        raise NotImplementedError

    def get_by_id(self, hospital_id: str) -> Optional[Hospital]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Hospital]:
        raise NotImplementedError

    def save(self, hospital: Hospital) -> None:
        raise NotImplementedError

    def delete_by_id(self, hospital_id: str) -> bool:
        raise NotImplementedError
