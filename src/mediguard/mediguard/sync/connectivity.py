from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from .remote import RemoteStore

logger = logging.getLogger(__name__)


class Connectivity(Protocol):
    def is_online(self) -> bool:
        raise NotImplementedError


class StaticConnectivity:
    """Fixed answer; used for forced-offline deployments and tests."""

    def __init__(self, online: bool = True):
        self.online = online

    def is_online(self) -> bool:
        return self.online


class RemotePingConnectivity:
    """Online when the remote store answers a ping; result cached briefly."""

    def __init__(self, remote: RemoteStore, *, ttl_seconds: float = 15.0, clock: Optional[Callable[[], float]] = None):
        self._remote = remote
        self._ttl = float(ttl_seconds)
        self._clock = clock or time.monotonic
        self._checked_at: Optional[float] = None
        self._online = False

    def is_online(self) -> bool:
        now = self._clock()
        if self._checked_at is not None and now - self._checked_at < self._ttl:
            return self._online

        try:
            online = bool(self._remote.ping())
        except Exception as e:
            logger.info("Connectivity probe failed: %s", e)
            online = False

        if online != self._online:
            logger.info("Network %s", "restored" if online else "lost")
        self._online = online
        self._checked_at = now
        return online
