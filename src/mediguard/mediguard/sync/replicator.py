"""Best-effort propagation of local writes to the remote store.

The local write has already happened when these methods are called. Remote
work is scheduled on an executor and its failures are logged and counted,
never raised back to the caller.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from .connectivity import Connectivity, StaticConnectivity
from .mapping import remote_column, to_remote
from .remote import NullRemoteStore, RemoteStore

logger = logging.getLogger(__name__)


class ImmediateExecutor(Executor):
    """Runs submitted work inline. Used in tests and single-shot scripts."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as e:
            future.set_exception(e)
        return future


class CloudReplicator:
    def __init__(
        self,
        remote: Optional[RemoteStore] = None,
        connectivity: Optional[Connectivity] = None,
        *,
        executor: Optional[Executor] = None,
    ):
        self._remote = remote or NullRemoteStore()
        self._connectivity = connectivity or StaticConnectivity(online=False)
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="cloud-push")
        self._lock = threading.Lock()
        self.failed_pushes = 0
        self.last_error: Optional[str] = None

    @property
    def remote(self) -> RemoteStore:
        return self._remote

    @property
    def connectivity(self) -> Connectivity:
        return self._connectivity

    def can_push(self) -> bool:
        return bool(self._remote.is_configured) and self._connectivity.is_online()

    def upsert(self, table: str, local_row: dict[str, Any]) -> Optional[Future]:
        if not self.can_push():
            return None
        return self._executor.submit(self._run, f"upsert {table}/{local_row.get('id')}", self._remote.upsert, table, to_remote(table, local_row))

    def delete(self, table: str, row_id: str) -> Optional[Future]:
        if not self.can_push():
            return None
        return self._executor.submit(self._run, f"delete {table}/{row_id}", self._remote.delete_by_id, table, row_id)

    def delete_where(self, table: str, field: str, value: Any) -> Optional[Future]:
        if not self.can_push():
            return None
        column = remote_column(table, field)
        return self._executor.submit(self._run, f"delete {table} where {column}", self._remote.delete_where, table, column, value)

    def _run(self, label: str, fn: Callable[..., Any], *args: Any) -> bool:
        try:
            fn(*args)
            return True
        except Exception as e:
            with self._lock:
                self.failed_pushes += 1
                self.last_error = f"{label}: {e}"
            logger.error("Cloud save failed (%s): %s", label, e)
            return False

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
