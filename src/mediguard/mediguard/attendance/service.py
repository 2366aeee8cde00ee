from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import minutes_between, now_local
from ..core.constants import GPS_TOLERANCE_METERS, LOCATION_TIMEOUT_SECONDS
from ..core.enums import Anomaly, DeviceCheckMode
from ..core.exceptions import LocationUnavailable, NoActiveShift, ShiftAlreadyActive, ValidationError
from ..devices.identity import DeviceIdentity
from ..geo.distance import calculate_distance, is_outside_geofence
from ..geo.location import LocationProvider, acquire_current_position
from ..hospitals.model import Hospital
from ..hospitals.repository import HospitalRepository
from ..users.binding import DeviceBindingAuthenticator
from ..users.model import StaffUser
from ..users.repository import UserRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftResult:
    record: AttendanceRecord
    warning: Optional[str] = None


class AttendanceService:
    """Shift state machine: OFF_SHIFT -> ACTIVE_SHIFT -> OFF_SHIFT.

    A user has at most one open record. Check-in hard-fails without a
    position fix; check-out always closes the shift, with reduced fidelity
    when no fix is available.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        hospitals: HospitalRepository,
        authenticator: DeviceBindingAuthenticator,
        device: DeviceIdentity,
        *,
        device_check_mode: DeviceCheckMode = DeviceCheckMode.LOGIN_ONLY,
        gps_tolerance: float = GPS_TOLERANCE_METERS,
        location_timeout: float = LOCATION_TIMEOUT_SECONDS,
    ):
        self._attendance = attendance
        self._users = users
        self._hospitals = hospitals
        self._auth = authenticator
        self._device = device
        self._mode = DeviceCheckMode(device_check_mode)
        self._tolerance = float(gps_tolerance)
        self._location_timeout = float(location_timeout)
        self._shift_lock = threading.RLock()

    def get_active_record(self, user_id: str) -> Optional[AttendanceRecord]:
        return self._attendance.get_open_for_user(user_id)

    def get_history(self, user_id: str, *, limit: int = 15) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_user(user_id, limit)

    def check_in(
        self,
        user: StaffUser,
        hospital: Hospital,
        provider: Optional[LocationProvider],
        *,
        now: Optional[datetime] = None,
    ) -> ShiftResult:
        if user.hospital_id and user.hospital_id != hospital.id:
            raise ValidationError("You are not registered at this hospital")

        with self._shift_lock:
            if self._attendance.get_open_for_user(user.id):
                raise ShiftAlreadyActive()

            device_id = self._device.get_or_create_device_id()
            if self._mode == DeviceCheckMode.STRICT:
                self._auth.verify_device(self._fresh(user), device_id)

            position = acquire_current_position(provider, timeout=self._location_timeout)
            now = now or now_local()

            distance = calculate_distance(position, hospital.coords)
            flagged = is_outside_geofence(distance, hospital.radius, tolerance=self._tolerance)

            self._auth.bind_if_unbound(self._fresh(user), device_id)

            record = AttendanceRecord(
                id=str(uuid.uuid4()),
                user_id=user.id,
                user_name=user.name,
                hospital_id=hospital.id,
                hospital_name=hospital.name,
                check_in_time=now,
                check_in_coords=position,
                distance_from_center=distance,
                flagged=flagged,
                check_in_device_id=device_id,
            )
            self._attendance.save(record)

        if flagged:
            logger.info("Flagged check-in for user %s: %.0fm from %s", user.id, distance, hospital.id)
            return ShiftResult(
                record,
                f"Warning: You are {round(distance)}m away from the hospital center. "
                "This check-in has been flagged for admin review.",
            )
        return ShiftResult(record)

    def check_out(
        self,
        record: AttendanceRecord,
        user: StaffUser,
        provider: Optional[LocationProvider],
        *,
        now: Optional[datetime] = None,
    ) -> ShiftResult:
        if not record.is_open:
            raise ValidationError("This shift has already ended")
        if record.user_id != user.id:
            raise ValidationError("This shift belongs to another staff member")

        with self._shift_lock:
            current_user = self._fresh(user)
            device_id = self._device.get_or_create_device_id()
            if self._mode == DeviceCheckMode.STRICT:
                self._auth.verify_device(current_user, device_id)

            anomaly = record.anomaly
            if current_user.bound_device_id and current_user.bound_device_id != device_id:
                logger.warning("Device mismatch on checkout for user %s", user.id)
                anomaly = Anomaly.DEVICE_MISMATCH

            try:
                position = acquire_current_position(provider, timeout=self._location_timeout)
            except LocationUnavailable as e:
                logger.warning("Checkout without location for record %s: %s", record.id, e)
                position = None

            now = now or now_local()
            duration = minutes_between(record.check_in_time, now)
            if duration < 0:
                logger.warning("Clock moved backwards for record %s; duration clamped to 0", record.id)
                duration = 0

            if position is None:
                closed = replace(
                    record,
                    check_out_time=now,
                    duration_minutes=duration,
                    check_out_device_id=device_id,
                    anomaly=anomaly,
                )
                self._attendance.save(closed)
                return ShiftResult(
                    closed,
                    f"Shift ended without location verification (GPS Error). Duration: {duration} mins.",
                )

            checkout_flagged = False
            distance = 0.0
            hospital = self._hospitals.get_by_id(record.hospital_id)
            if hospital:
                distance = calculate_distance(position, hospital.coords)
                checkout_flagged = is_outside_geofence(distance, hospital.radius, tolerance=self._tolerance)

            closed = replace(
                record,
                check_out_time=now,
                check_out_coords=position,
                duration_minutes=duration,
                check_out_device_id=device_id,
                flagged=record.flagged or checkout_flagged,
                anomaly=anomaly,
            )
            self._attendance.save(closed)

        if checkout_flagged:
            return ShiftResult(
                closed,
                f"Shift ended. Warning: You are {round(distance)}m away from the location. This checkout has been flagged.",
            )
        return ShiftResult(closed)

    def check_out_user(
        self,
        user: StaffUser,
        provider: Optional[LocationProvider],
        *,
        now: Optional[datetime] = None,
    ) -> ShiftResult:
        record = self._attendance.get_open_for_user(user.id)
        if not record:
            raise NoActiveShift()
        return self.check_out(record, user, provider, now=now)

    def _fresh(self, user: StaffUser) -> StaffUser:
        # Bindings may have changed since the caller loaded the user (sync, admin reset).
        return self._users.get_by_id(user.id) or user
