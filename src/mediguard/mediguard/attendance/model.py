from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso, to_iso
from ..core.enums import Anomaly
from ..geo.model import Coordinate


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one shift, opened at check-in and closed once at check-out.

    `user_name` and `hospital_name` are denormalized so records stay readable
    after the owning entities change or disappear.
    """

    id: str
    user_id: str
    user_name: str
    hospital_id: str
    hospital_name: str
    check_in_time: datetime
    check_in_coords: Coordinate
    distance_from_center: float
    flagged: bool = False
    check_in_device_id: Optional[str] = None
    check_out_time: Optional[datetime] = None
    check_out_coords: Optional[Coordinate] = None
    duration_minutes: Optional[int] = None
    check_out_device_id: Optional[str] = None
    anomaly: Optional[Anomaly] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "AttendanceRecord":
        check_in_time = parse_iso(row.get("checkInTime"))
        check_in_coords = Coordinate.from_dict(row.get("checkInCoords"))
        if check_in_time is None or check_in_coords is None:
            raise ValueError("attendance row is missing check-in data")

        duration = row.get("durationMinutes")
        anomaly = row.get("anomaly")
        return cls(
            id=str(row["id"]),
            user_id=str(row["userId"]),
            user_name=str(row.get("userName") or ""),
            hospital_id=str(row["hospitalId"]),
            hospital_name=str(row.get("hospitalName") or ""),
            check_in_time=check_in_time,
            check_in_coords=check_in_coords,
            distance_from_center=float(row.get("distanceFromCenter") or 0.0),
            flagged=bool(row.get("flagged", False)),
            check_in_device_id=row.get("checkInDeviceId") or None,
            check_out_time=parse_iso(row.get("checkOutTime")),
            check_out_coords=Coordinate.from_dict(row.get("checkOutCoords")),
            duration_minutes=int(duration) if duration is not None else None,
            check_out_device_id=row.get("checkOutDeviceId") or None,
            anomaly=Anomaly(anomaly) if anomaly else None,
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "hospitalId": self.hospital_id,
            "hospitalName": self.hospital_name,
            "checkInTime": to_iso(self.check_in_time),
            "checkInCoords": self.check_in_coords.to_dict(),
            "flagged": self.flagged,
            "distanceFromCenter": self.distance_from_center,
        }
        optional = {
            "checkInDeviceId": self.check_in_device_id,
            "checkOutTime": to_iso(self.check_out_time),
            "checkOutCoords": self.check_out_coords.to_dict() if self.check_out_coords else None,
            "durationMinutes": self.duration_minutes,
            "checkOutDeviceId": self.check_out_device_id,
            "anomaly": self.anomaly.value if self.anomaly else None,
        }
        row.update({k: v for k, v in optional.items() if v is not None})
        return row
