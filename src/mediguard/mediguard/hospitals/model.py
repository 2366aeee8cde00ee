from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso, to_iso
from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS
from ..geo.model import Coordinate


@dataclass(frozen=True)
class EmailReportConfig:
    recipient_email: str
    enabled: bool = False
    last_report_date: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["EmailReportConfig"]:
        if not data:
            return None
        return cls(
            recipient_email=str(data.get("recipientEmail") or ""),
            enabled=bool(data.get("enabled", False)),
            last_report_date=parse_iso(data.get("lastReportDate")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"recipientEmail": self.recipient_email, "enabled": self.enabled}
        if self.last_report_date is not None:
            out["lastReportDate"] = to_iso(self.last_report_date)
        return out


@dataclass(frozen=True)
class Hospital:
    """Domain entity: a hospital and its geofence (coords + radius).

    Passwords are kept as werkzeug hashes only.
    """

    id: str
    name: str
    registration_number: str
    login_username: str
    login_password_hash: str
    log_view_password_hash: str
    coords: Coordinate
    radius: float = DEFAULT_GEOFENCE_RADIUS_METERS
    email_report_config: Optional[EmailReportConfig] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Hospital":
        coords = Coordinate.from_dict(row.get("coords"))
        if coords is None:
            raise ValueError("hospital row has no coords")
        return cls(
            id=str(row["id"]),
            name=str(row["name"]),
            registration_number=str(row.get("registrationNumber") or ""),
            login_username=str(row.get("loginUsername") or ""),
            login_password_hash=str(row.get("loginPasswordHash") or ""),
            log_view_password_hash=str(row.get("logViewPasswordHash") or ""),
            coords=coords,
            radius=float(row.get("radius", DEFAULT_GEOFENCE_RADIUS_METERS)),
            email_report_config=EmailReportConfig.from_dict(row.get("emailReportConfig")),
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "registrationNumber": self.registration_number,
            "loginUsername": self.login_username,
            "loginPasswordHash": self.login_password_hash,
            "logViewPasswordHash": self.log_view_password_hash,
            "coords": self.coords.to_dict(),
            "radius": self.radius,
        }
        if self.email_report_config is not None:
            row["emailReportConfig"] = self.email_report_config.to_dict()
        return row
