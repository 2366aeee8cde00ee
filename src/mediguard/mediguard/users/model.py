from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class StaffUser:
    """Domain entity: a staff member (or the system administrator).

    Note: Plain data object, no storage access. `bound_device_id` pairs the
    account with exactly one device once set.
    """

    id: str
    name: str
    role: Role = Role.STAFF
    hospital_id: Optional[str] = None
    username: Optional[str] = None
    pin_hash: Optional[str] = None
    bound_device_id: Optional[str] = None
    profile_picture: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def with_device(self, device_id: Optional[str]) -> "StaffUser":
        return replace(self, bound_device_id=device_id)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "StaffUser":
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            role=Role(row.get("role") or Role.STAFF.value),
            hospital_id=row.get("hospitalId") or None,
            username=row.get("username") or None,
            pin_hash=row.get("pinHash") or None,
            bound_device_id=row.get("boundDeviceId") or None,
            profile_picture=row.get("profilePicture") or None,
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {"id": self.id, "name": self.name, "role": self.role.value}
        optional = {
            "hospitalId": self.hospital_id,
            "username": self.username,
            "pinHash": self.pin_hash,
            "boundDeviceId": self.bound_device_id,
            "profilePicture": self.profile_picture,
        }
        row.update({k: v for k, v in optional.items() if v is not None})
        return row
