"""Single-shot position acquisition.

A provider performs one high-accuracy read and never serves a cached fix
(maximum_age is always 0). The caller blocks until the provider answers or
the timeout elapses; unsupported hardware, denied permission and timeouts
all surface as LocationUnavailable.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from ..core.constants import LOCATION_TIMEOUT_SECONDS
from ..core.exceptions import LocationUnavailable, ValidationError
from .model import Coordinate

logger = logging.getLogger(__name__)


class LocationProvider(Protocol):
    def read_position(self, *, high_accuracy: bool, maximum_age: float) -> Coordinate:
        raise NotImplementedError


class SubmittedPositionProvider:
    """Position captured by the client (browser geolocation) and posted with the request."""

    def __init__(self, position: Optional[Coordinate], *, error: Optional[str] = None):
        self._position = position
        self._error = error

    @classmethod
    def from_payload(cls, data: Optional[dict]) -> "SubmittedPositionProvider":
        data = data or {}
        if data.get("location_error"):
            return cls(None, error=str(data["location_error"]))
        if data.get("latitude") is None or data.get("longitude") is None:
            return cls(None, error="Geolocation is not supported by this device.")
        try:
            return cls(Coordinate.from_dict(data))
        except (TypeError, ValueError, ValidationError) as e:
            return cls(None, error=f"Invalid position: {e}")

    def read_position(self, *, high_accuracy: bool, maximum_age: float) -> Coordinate:
        if self._position is None:
            raise LocationUnavailable(self._error or "Could not retrieve location.")
        return self._position


class CallableLocationProvider:
    """Adapter for device integrations: wraps a zero-argument callable returning a Coordinate."""

    def __init__(self, read: Callable[[], Coordinate]):
        self._read = read

    def read_position(self, *, high_accuracy: bool, maximum_age: float) -> Coordinate:
        return self._read()


def acquire_current_position(
    provider: Optional[LocationProvider],
    *,
    timeout: float = LOCATION_TIMEOUT_SECONDS,
) -> Coordinate:
    if provider is None:
        raise LocationUnavailable("Geolocation is not supported by this device.")

    outcome: dict = {}

    def read() -> None:
        try:
            outcome["position"] = provider.read_position(high_accuracy=True, maximum_age=0)
        except Exception as e:
            outcome["error"] = e

    # Daemon: a provider that never answers must not hold up interpreter exit.
    worker = threading.Thread(target=read, name="geolocation", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        logger.warning("Location read timed out after %.1fs", timeout)
        raise LocationUnavailable("Location request timed out.")

    error = outcome.get("error")
    if error is None:
        return outcome["position"]
    if isinstance(error, LocationUnavailable):
        raise error
    if isinstance(error, PermissionError):
        raise LocationUnavailable("Location permission denied.") from error
    logger.warning("Location provider failed: %s", error)
    raise LocationUnavailable(str(error) or "Could not retrieve location.") from error
