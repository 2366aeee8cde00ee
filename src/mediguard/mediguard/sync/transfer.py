"""Manual device-to-device transfer (links / pasted codes).

Used when devices cannot reach each other or the remote store. Payloads
are decoded and validated completely before anything is written.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.codec import decode_payload, encode_payload
from ..core.enums import ImportMergePolicy, Role
from ..core.exceptions import AuthorizationError, CorruptPayload, ValidationError
from ..hospitals.model import Hospital
from ..hospitals.repository import HospitalRepository
from ..users.model import StaffUser
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchImportResult:
    imported_count: int
    skipped_count: int = 0


@dataclass(frozen=True)
class ConfigImportResult:
    hospital_id: str
    hospital_name: str
    staff_count: int


def _parse_records(data: Any) -> list[AttendanceRecord]:
    if not isinstance(data, list):
        raise CorruptPayload("Invalid data code: expected a list of attendance records")
    records = []
    for item in data:
        if not isinstance(item, dict):
            raise CorruptPayload("Invalid data code: malformed attendance record")
        try:
            records.append(AttendanceRecord.from_row(item))
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise CorruptPayload(f"Invalid data code: {e}") from e
    return records


class TransferService:
    def __init__(
        self,
        hospitals: HospitalRepository,
        users: UserRepository,
        attendance: AttendanceRepository,
        *,
        merge_policy: ImportMergePolicy = ImportMergePolicy.CHECKOUT_ONLY,
    ):
        self._hospitals = hospitals
        self._users = users
        self._attendance = attendance
        self._policy = ImportMergePolicy(merge_policy)

    def export_batch(self, hospital_id: str, user_id: Optional[str] = None) -> str:
        records = self._attendance.list_for_hospital(hospital_id, user_id=user_id)
        return encode_payload([r.to_row() for r in records])

    def import_batch(self, encoded: str) -> BatchImportResult:
        records = _parse_records(decode_payload(encoded))

        imported = 0
        skipped = 0
        for incoming in records:
            if self._policy == ImportMergePolicy.UPSERT_ALL or self._accepts(incoming):
                self._attendance.save(incoming)
                imported += 1
            else:
                skipped += 1

        logger.info("Imported %d attendance records (%d skipped)", imported, skipped)
        return BatchImportResult(imported_count=imported, skipped_count=skipped)

    def _accepts(self, incoming: AttendanceRecord) -> bool:
        existing = self._attendance.get_by_id(incoming.id)
        if existing is None:
            if incoming.is_open:
                open_local = self._attendance.get_open_for_user(incoming.user_id)
                if open_local is not None:
                    logger.warning("Skipping open record %s: user %s already has an open shift", incoming.id, incoming.user_id)
                    return False
            return True
        return existing.is_open and not incoming.is_open

    def export_config(self, hospital_id: str, *, now_ms: Optional[int] = None) -> str:
        hospital = self._hospitals.get_by_id(hospital_id)
        if not hospital:
            raise ValidationError("Hospital not found")
        staff = self._users.list_by_hospital(hospital_id)
        return encode_payload(
            {
                "hospital": hospital.to_row(),
                "staff": [u.to_row() for u in staff],
                "timestamp": now_ms if now_ms is not None else int(time.time() * 1000),
            }
        )

    def build_config_link(self, hospital_id: str, base_url: str) -> str:
        encoded = self.export_config(hospital_id)
        parts = urlsplit(base_url)
        query = [(k, v) for k, v in parse_qsl(parts.query) if k != "config"]
        query.append(("config", encoded))
        return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))

    def import_config(
        self,
        encoded: str,
        *,
        is_admin: bool = False,
        session_hospital_id: Optional[str] = None,
    ) -> ConfigImportResult:
        """Provision this device from an exported hospital configuration.

        Anyone may load a hospital that is not on this device yet. Replacing
        an existing hospital needs the administrator or that hospital's own
        session. Only STAFF accounts of the payload hospital are accepted.
        """
        payload = decode_payload(encoded)
        if not isinstance(payload, dict) or not payload.get("hospital") or not isinstance(payload.get("staff"), list):
            raise CorruptPayload("Invalid Config")
        try:
            hospital = Hospital.from_row(payload["hospital"])
            staff = [StaffUser.from_row(s) for s in payload["staff"]]
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise CorruptPayload(f"Invalid Config: {e}") from e

        for user in staff:
            if user.role != Role.STAFF or user.hospital_id != hospital.id:
                raise CorruptPayload(f"Invalid Config: staff entry {user.id} does not belong to {hospital.name}")

        if self._hospitals.get_by_id(hospital.id) is not None and not (is_admin or session_hospital_id == hospital.id):
            raise AuthorizationError("This hospital is already set up on this device. Log in to replace its configuration.")
        for user in staff:
            existing = self._users.get_by_id(user.id)
            if existing is not None and (existing.role != Role.STAFF or existing.hospital_id != hospital.id):
                raise AuthorizationError(f"Account {user.id} belongs to another hospital")

        self._hospitals.save(hospital)
        for user in staff:
            self._users.save(user)

        logger.info("Imported configuration for %s (%d staff)", hospital.name, len(staff))
        return ConfigImportResult(hospital_id=hospital.id, hospital_name=hospital.name, staff_count=len(staff))
