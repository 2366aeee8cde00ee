"""Bidirectional field mapping between local rows and remote columns.

Local rows use the camelCase keys of the on-device JSON store and transfer
payloads; remote tables use snake_case columns. Every mapped field must
round-trip unchanged.
"""

from __future__ import annotations

from typing import Any

from ..core.constants import ATTENDANCE_TABLE, HOSPITALS_TABLE, USERS_TABLE

Row = dict[str, Any]

HOSPITAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "id"),
    ("name", "name"),
    ("registrationNumber", "registration_number"),
    ("loginUsername", "login_username"),
    ("loginPasswordHash", "login_password_hash"),
    ("logViewPasswordHash", "log_view_password_hash"),
    ("coords", "coords"),
    ("radius", "radius"),
    ("emailReportConfig", "email_report_config"),
)

USER_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "id"),
    ("name", "name"),
    ("role", "role"),
    ("hospitalId", "hospital_id"),
    ("username", "username"),
    ("pinHash", "pin_hash"),
    ("boundDeviceId", "bound_device_id"),
    ("profilePicture", "profile_picture"),
)

ATTENDANCE_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "id"),
    ("userId", "user_id"),
    ("userName", "user_name"),
    ("hospitalId", "hospital_id"),
    ("hospitalName", "hospital_name"),
    ("checkInTime", "check_in_time"),
    ("checkOutTime", "check_out_time"),
    ("checkInCoords", "check_in_coords"),
    ("checkOutCoords", "check_out_coords"),
    ("flagged", "flagged"),
    ("distanceFromCenter", "distance_from_center"),
    ("durationMinutes", "duration_minutes"),
    ("checkInDeviceId", "check_in_device_id"),
    ("checkOutDeviceId", "check_out_device_id"),
    ("anomaly", "anomaly"),
)

FIELD_MAPS: dict[str, tuple[tuple[str, str], ...]] = {
    HOSPITALS_TABLE: HOSPITAL_FIELDS,
    USERS_TABLE: USER_FIELDS,
    ATTENDANCE_TABLE: ATTENDANCE_FIELDS,
}

# Columns holding nested JSON objects (stored as JSON text by SQL backends).
JSON_COLUMNS: dict[str, frozenset[str]] = {
    HOSPITALS_TABLE: frozenset({"coords", "email_report_config"}),
    USERS_TABLE: frozenset(),
    ATTENDANCE_TABLE: frozenset({"check_in_coords", "check_out_coords"}),
}


def _fields(table: str) -> tuple[tuple[str, str], ...]:
    try:
        return FIELD_MAPS[table]
    except KeyError:
        raise ValueError(f"Unknown table: {table}") from None


def to_remote(table: str, row: Row) -> Row:
    return {column: row.get(field) for field, column in _fields(table)}


def from_remote(table: str, row: Row) -> Row:
    # Absent/NULL columns are dropped so local rows stay sparse like freshly created ones.
    out: Row = {}
    for field, column in _fields(table):
        value = row.get(column)
        if value is not None:
            out[field] = value
    return out


def remote_column(table: str, field: str) -> str:
    for f, column in _fields(table):
        if f == field:
            return column
    raise ValueError(f"Unknown field {field!r} for table {table}")
