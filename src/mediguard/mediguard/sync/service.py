from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from ..core.constants import ATTENDANCE_TABLE, HOSPITALS_TABLE, USERS_TABLE
from ..core.enums import SyncMode
from ..core.exceptions import RemoteUnreachable
from ..storage.collection import LocalCollection
from .connectivity import Connectivity
from .mapping import from_remote, to_remote
from .remote import RemoteStore

logger = logging.getLogger(__name__)

SYNC_ORDER = (HOSPITALS_TABLE, USERS_TABLE, ATTENDANCE_TABLE)


@dataclass(frozen=True)
class SyncResult:
    success: bool
    message: str
    mode: SyncMode = SyncMode.ONLINE
    pulled: dict[str, int] = field(default_factory=dict)
    pushed: dict[str, int] = field(default_factory=dict)


class SyncService:
    """Reconciles local collections with the remote store.

    Per collection: an empty remote with local data is seeded from local
    (bootstrap); otherwise the remote snapshot replaces the local collection
    wholesale. A collection whose fetch fails is left untouched.
    """

    def __init__(
        self,
        collections: Mapping[str, LocalCollection],
        remote: RemoteStore,
        connectivity: Connectivity,
    ):
        missing = [t for t in SYNC_ORDER if t not in collections]
        if missing:
            raise ValueError(f"Missing local collections: {missing}")
        self._collections = dict(collections)
        self._remote = remote
        self._connectivity = connectivity

    def mode(self) -> SyncMode:
        if not self._remote.is_configured:
            return SyncMode.LOCAL_ONLY
        return SyncMode.ONLINE if self._connectivity.is_online() else SyncMode.OFFLINE

    def pull_and_reconcile(self) -> SyncResult:
        mode = self.mode()
        if mode == SyncMode.LOCAL_ONLY:
            return SyncResult(True, "Local Mode Only", mode=mode)
        if mode == SyncMode.OFFLINE:
            return SyncResult(True, "Offline", mode=mode)

        pulled: dict[str, int] = {}
        pushed: dict[str, int] = {}
        failed: list[str] = []
        for table in SYNC_ORDER:
            try:
                self._reconcile(table, pulled=pulled, pushed=pushed)
            except RemoteUnreachable as e:
                logger.warning("Sync error (%s): %s", table, e)
                failed.append(table)
            except Exception:
                logger.exception("Sync of %s aborted", table)
                failed.append(table)

        if failed:
            return SyncResult(False, f"Sync failed: {', '.join(failed)}", mode=mode, pulled=pulled, pushed=pushed)
        return SyncResult(True, "Data synced", mode=mode, pulled=pulled, pushed=pushed)

    def _reconcile(self, table: str, *, pulled: dict[str, int], pushed: dict[str, int]) -> None:
        remote_rows = list(self._remote.select_all(table))
        collection = self._collections[table]

        if not remote_rows:
            # Push from a snapshot so local writes never wait on the network.
            local_rows = collection.all()
            if local_rows:
                self._push_all(table, local_rows, pushed)
            else:
                pulled[table] = 0
            return

        # Map the whole snapshot before touching local storage.
        snapshot = [from_remote(table, r) for r in remote_rows]
        collection.replace_all(snapshot)
        pulled[table] = len(snapshot)

    def _push_all(self, table: str, local_rows: list[dict], pushed: dict[str, int]) -> None:
        logger.info("Remote %s empty. Pushing %d local rows", table, len(local_rows))
        count = 0
        for row in local_rows:
            try:
                self._remote.upsert(table, to_remote(table, row))
                count += 1
            except RemoteUnreachable as e:
                logger.error("Failed to push %s/%s: %s", table, row.get("id"), e)
        pushed[table] = count
