from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..common.validators import require_latitude, require_longitude


@dataclass(frozen=True)
class Coordinate:
    """WGS84 point with optional accuracy radius in meters."""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["Coordinate"]:
        if not data:
            return None
        accuracy = data.get("accuracy")
        return cls(
            latitude=require_latitude(data["latitude"]),
            longitude=require_longitude(data["longitude"]),
            accuracy=float(accuracy) if accuracy is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"latitude": self.latitude, "longitude": self.longitude}
        if self.accuracy is not None:
            out["accuracy"] = self.accuracy
        return out
