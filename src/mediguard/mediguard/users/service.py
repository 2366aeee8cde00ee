from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_non_empty, require_pin
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, UserNotFound, ValidationError
from ..hospitals.repository import HospitalRepository
from .binding import AuthResult, DeviceBindingAuthenticator
from .model import StaffUser
from .repository import UserRepository

logger = logging.getLogger(__name__)

SUPER_ADMIN_ID = "admin-super"


def _check_secret(secret_hash: Optional[str], secret: str) -> bool:
    if not secret_hash:
        return False
    try:
        return check_password_hash(secret_hash, secret or "")
    except (ValueError, TypeError):
        # e.g. placeholder hashes or corrupted values synced from elsewhere
        return False


class AuthService:
    """Use case: staff and administrator login."""

    def __init__(self, users: UserRepository, authenticator: DeviceBindingAuthenticator):
        self._users = users
        self._authenticator = authenticator

    def login(self, identifier: str) -> AuthResult:
        """Username-only login, guarded by device binding."""
        return self._authenticator.authenticate(identifier)

    def login_with_pin(self, user_id: str, pin: str) -> AuthResult:
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound()
        if not _check_secret(user.pin_hash, pin):
            raise AuthenticationError("Incorrect PIN")
        return self._authenticator.authenticate(user.username or user.id)

    def login_admin(self, pin: str) -> StaffUser:
        for user in self._users.list_all():
            if user.is_admin and _check_secret(user.pin_hash, pin):
                return user
        raise AuthenticationError("Incorrect administrator PIN")


class UserService:
    """Use case: manage staff accounts (hospital managers and admin)."""

    def __init__(self, users: UserRepository, hospitals: HospitalRepository):
        self._users = users
        self._hospitals = hospitals

    def create_staff(
        self,
        *,
        hospital_id: str,
        name: str,
        pin: str,
        username: Optional[str] = None,
    ) -> StaffUser:
        name = require_non_empty(name, "Name")
        pin = require_pin(pin)
        if not self._hospitals.get_by_id(hospital_id):
            raise ValidationError("Hospital not found")

        if username:
            username = username.strip()
            if self._users.get_by_username(username):
                raise ValidationError("Username already exists")

        user = StaffUser(
            id=str(uuid.uuid4()),
            name=name,
            role=Role.STAFF,
            hospital_id=hospital_id,
            username=username or None,
            pin_hash=generate_password_hash(pin),
        )
        self._users.save(user)
        return user

    def list_staff(self, hospital_id: str) -> Sequence[StaffUser]:
        return [u for u in self._users.list_by_hospital(hospital_id) if u.role == Role.STAFF]

    def get(self, user_id: str) -> StaffUser:
        user = self._users.get_by_id(user_id)
        if not user:
            raise UserNotFound()
        return user

    def delete_staff(self, user_id: str) -> None:
        user = self.get(user_id)
        if user.is_admin:
            raise ValidationError("Cannot delete the administrator account")
        if not self._users.delete_by_id(user_id):
            raise ValidationError("Failed to remove staff member")

    def reset_device_binding(self, user_id: str) -> StaffUser:
        """Administrative reset: the next successful login rebinds the account."""
        user = self.get(user_id)
        if not user.bound_device_id:
            return user
        reset = user.with_device(None)
        self._users.save(reset)
        logger.info("Device binding reset for user %s", user_id)
        return reset

    def ensure_admin(self, pin: str) -> StaffUser:
        for user in self._users.list_all():
            if user.is_admin:
                return user
        admin = StaffUser(
            id=SUPER_ADMIN_ID,
            name="System Owner",
            role=Role.ADMIN,
            hospital_id=None,
            pin_hash=generate_password_hash(require_pin(pin)),
        )
        self._users.save(admin)
        logger.info("Created system administrator account")
        return admin
