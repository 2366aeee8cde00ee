from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ..core.exceptions import AccountBoundElsewhere, DeviceOwnedByOther, UserNotFound
from ..devices.identity import DeviceIdentity
from .model import StaffUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    granted: bool
    user: StaffUser


class DeviceBindingAuthenticator:
    """Enforces one device per staff account and one staff account per device.

    The first successful authentication from an unbound account pairs it with
    the current device. Only an administrative reset clears the pairing.
    Administrators bypass every device check so they cannot be locked out.
    """

    def __init__(self, users: UserRepository, device: DeviceIdentity):
        self._users = users
        self._device = device
        self._lock = threading.RLock()

    def current_device_id(self) -> str:
        return self._device.get_or_create_device_id()

    def resolve(self, identifier: str) -> StaffUser:
        identifier = (identifier or "").strip()
        if not identifier:
            raise UserNotFound()
        user = self._users.get_by_username(identifier) or self._users.get_by_id(identifier)
        if not user:
            raise UserNotFound()
        return user

    def _owner_of(self, device_id: str, *, excluding: str) -> Optional[StaffUser]:
        for other in self._users.get_by_bound_device(device_id):
            if other.id != excluding and not other.is_admin:
                return other
        return None

    def verify_device(self, user: StaffUser, device_id: Optional[str] = None) -> None:
        """Raise if this device belongs to someone else or the account belongs to another device."""
        if user.is_admin:
            return
        device_id = device_id or self.current_device_id()

        owner = self._owner_of(device_id, excluding=user.id)
        if owner is not None:
            logger.warning("Device ...%s already bound to user %s; rejecting %s", device_id[-6:], owner.id, user.id)
            raise DeviceOwnedByOther()

        if user.bound_device_id and user.bound_device_id != device_id:
            logger.warning("User %s is bound to another device", user.id)
            raise AccountBoundElsewhere()

    def bind_if_unbound(self, user: StaffUser, device_id: Optional[str] = None) -> StaffUser:
        """Pair an unbound account with this device unless the device is taken."""
        if user.is_admin or user.bound_device_id:
            return user
        device_id = device_id or self.current_device_id()

        with self._lock:
            owner = self._owner_of(device_id, excluding=user.id)
            if owner is not None:
                logger.warning("Not binding user %s: device already bound to %s", user.id, owner.id)
                return user
            bound = user.with_device(device_id)
            self._users.save(bound)
            logger.info("Bound user %s to device ...%s", user.id, device_id[-6:])
            return bound

    def authenticate(self, identifier: str) -> AuthResult:
        with self._lock:
            user = self.resolve(identifier)
            if user.is_admin:
                return AuthResult(granted=True, user=user)

            device_id = self.current_device_id()
            self.verify_device(user, device_id)
            user = self.bind_if_unbound(user, device_id)
            return AuthResult(granted=True, user=user)
