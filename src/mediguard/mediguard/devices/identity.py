from __future__ import annotations

import logging
import threading
import uuid

from ..core.constants import DEVICE_ID_KEY
from ..storage.kv import KeyValueStore

logger = logging.getLogger(__name__)


class DeviceIdentity:
    """Stable random identifier for the device running this instance.

    Persisted in the local store and never regenerated while present. This
    is a best-effort deterrent against account sharing, not a security
    boundary: clearing local storage yields a fresh identity.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._lock = threading.Lock()

    def get_or_create_device_id(self) -> str:
        with self._lock:
            device_id = self._store.get(DEVICE_ID_KEY)
            if not device_id:
                device_id = str(uuid.uuid4())
                self._store.set(DEVICE_ID_KEY, device_id)
                logger.info("Generated device id ...%s", device_id[-6:])
            return str(device_id)
