from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization and device-check bypass."""

    ADMIN = "ADMIN"
    STAFF = "STAFF"


class Anomaly(str, Enum):
    """Record-level integrity marker, stronger than a location flag."""

    DEVICE_MISMATCH = "DEVICE_MISMATCH"


class TimeStatus(str, Enum):
    """Derived punctuality label for a check-in or check-out."""

    ON_TIME = "On Time"
    LATE = "Late"
    EARLY = "Early"
    NOT_AVAILABLE = "N/A"


class DeviceCheckMode(str, Enum):
    """Where device binding is enforced.

    LOGIN_ONLY checks at login and records mismatches as anomalies at
    check-out. STRICT re-runs the ownership checks at check-in and check-out.
    """

    LOGIN_ONLY = "LOGIN_ONLY"
    STRICT = "STRICT"


class ImportMergePolicy(str, Enum):
    """How a manually imported attendance batch is applied."""

    UPSERT_ALL = "UPSERT_ALL"
    CHECKOUT_ONLY = "CHECKOUT_ONLY"


class SyncMode(str, Enum):
    LOCAL_ONLY = "LOCAL_ONLY"
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
