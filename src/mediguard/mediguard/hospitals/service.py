from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS, LOCATION_TIMEOUT_SECONDS, REPORT_INTERVAL_DAYS
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..geo.location import LocationProvider, acquire_current_position
from ..users.repository import UserRepository
from .model import EmailReportConfig, Hospital
from .repository import HospitalRepository

logger = logging.getLogger(__name__)


def _check(secret_hash: str, secret: str) -> bool:
    if not secret_hash:
        return False
    try:
        return check_password_hash(secret_hash, secret or "")
    except (ValueError, TypeError):
        return False


class HospitalService:
    """Use case: hospital registration, administration and manager login."""

    def __init__(
        self,
        hospitals: HospitalRepository,
        users: UserRepository,
        attendance: AttendanceRepository,
        *,
        location_timeout: float = LOCATION_TIMEOUT_SECONDS,
    ):
        self._hospitals = hospitals
        self._users = users
        self._attendance = attendance
        self._location_timeout = float(location_timeout)

    def list_all(self) -> Sequence[Hospital]:
        return self._hospitals.list_all()

    def get(self, hospital_id: str) -> Hospital:
        hospital = self._hospitals.get_by_id(hospital_id)
        if not hospital:
            raise ValidationError("Hospital not found")
        return hospital

    def _require_unique_username(self, username: str, *, hospital_id: Optional[str] = None) -> None:
        existing = self._hospitals.get_by_username(username)
        if existing and existing.id != hospital_id:
            raise ValidationError("Login username already in use")

    def register(
        self,
        *,
        name: str,
        registration_number: str,
        username: str,
        password: str,
        log_view_password: str,
        provider: Optional[LocationProvider],
    ) -> Hospital:
        """Register a hospital at the registrant's current position.

        The geofence center is captured live; LocationUnavailable propagates
        and nothing is saved.
        """
        name = require_non_empty(name, "Hospital name")
        registration_number = require_non_empty(registration_number, "Registration number")
        username = require_non_empty(username, "Login username")
        require_min_length(password, "Password", 4)
        require_min_length(log_view_password, "Log view password", 4)
        self._require_unique_username(username)

        position = acquire_current_position(provider, timeout=self._location_timeout)

        hospital = Hospital(
            id=str(uuid.uuid4()),
            name=name,
            registration_number=registration_number,
            login_username=username,
            login_password_hash=generate_password_hash(password),
            log_view_password_hash=generate_password_hash(log_view_password),
            coords=position,
            radius=DEFAULT_GEOFENCE_RADIUS_METERS,
        )
        self._hospitals.save(hospital)
        logger.info("Registered hospital %s (%s)", hospital.name, hospital.id)
        return hospital

    def update_identity(
        self,
        hospital_id: str,
        *,
        name: str,
        registration_number: str,
        username: str,
        password: Optional[str] = None,
        log_view_password: Optional[str] = None,
    ) -> Hospital:
        """Edit identity and credentials. The geofence is left as captured."""
        hospital = self.get(hospital_id)
        username = require_non_empty(username, "Login username")
        self._require_unique_username(username, hospital_id=hospital_id)

        updated = replace(
            hospital,
            name=require_non_empty(name, "Hospital name"),
            registration_number=require_non_empty(registration_number, "Registration number"),
            login_username=username,
        )
        if password:
            updated = replace(updated, login_password_hash=generate_password_hash(require_min_length(password, "Password", 4)))
        if log_view_password:
            updated = replace(
                updated,
                log_view_password_hash=generate_password_hash(require_min_length(log_view_password, "Log view password", 4)),
            )
        self._hospitals.save(updated)
        return updated

    def recapture_geofence(
        self,
        hospital_id: str,
        provider: Optional[LocationProvider],
        *,
        radius: Optional[float] = None,
    ) -> Hospital:
        """Move the geofence center to the caller's current position."""
        hospital = self.get(hospital_id)
        position = acquire_current_position(provider, timeout=self._location_timeout)
        new_radius = float(radius) if radius is not None else hospital.radius
        if new_radius <= 0:
            raise ValidationError("Radius must be positive")
        updated = replace(hospital, coords=position, radius=new_radius)
        self._hospitals.save(updated)
        logger.info("Geofence recaptured for hospital %s", hospital_id)
        return updated

    def delete_hospital(self, hospital_id: str) -> None:
        """Remove a hospital together with its staff and their attendance records."""
        self.get(hospital_id)
        records = self._attendance.delete_by_hospital(hospital_id)
        staff = self._users.delete_by_hospital(hospital_id)
        self._hospitals.delete_by_id(hospital_id)
        logger.info("Deleted hospital %s (staff=%d, records=%d)", hospital_id, staff, records)

    def authenticate(self, username: str, password: str) -> Hospital:
        hospital = self._hospitals.get_by_username((username or "").strip())
        if not hospital or not _check(hospital.login_password_hash, password):
            raise AuthenticationError("Invalid username or password")
        return hospital

    def verify_log_view_password(self, hospital_id: str, password: str) -> None:
        hospital = self.get(hospital_id)
        if not _check(hospital.log_view_password_hash, password):
            raise AuthorizationError("Incorrect password. Please contact Admin if you forgot it.")

    def save_email_config(self, hospital_id: str, *, recipient_email: str) -> Hospital:
        hospital = self.get(hospital_id)
        recipient_email = require_non_empty(recipient_email, "Recipient email")
        if "@" not in recipient_email:
            raise ValidationError("Recipient email is invalid")
        previous = hospital.email_report_config
        config = EmailReportConfig(
            recipient_email=recipient_email,
            enabled=True,
            last_report_date=previous.last_report_date if previous else None,
        )
        updated = replace(hospital, email_report_config=config)
        self._hospitals.save(updated)
        return updated

    def is_report_due(self, hospital: Hospital, *, now: Optional[datetime] = None) -> bool:
        config = hospital.email_report_config
        if not config or not config.enabled:
            return False
        if config.last_report_date is None:
            return True
        now = now or now_local()
        return now - config.last_report_date >= timedelta(days=REPORT_INTERVAL_DAYS)

    def mark_report_sent(self, hospital_id: str, *, now: Optional[datetime] = None) -> Hospital:
        hospital = self.get(hospital_id)
        if not hospital.email_report_config:
            raise ValidationError("Email reports are not configured")
        config = replace(hospital.email_report_config, last_report_date=now or now_local())
        updated = replace(hospital, email_report_config=config)
        self._hospitals.save(updated)
        return updated
