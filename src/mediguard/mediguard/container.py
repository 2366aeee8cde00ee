from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.local_repository import LocalAttendanceRepository
from .attendance.reporting import AttendanceReportService
from .attendance.service import AttendanceService
from .core.constants import ATTENDANCE_TABLE, HOSPITALS_TABLE, REMOTE_TIMEOUT_SECONDS, USERS_TABLE
from .core.enums import DeviceCheckMode, ImportMergePolicy
from .database.connection import DBConfig, DatabaseConnection
from .devices.identity import DeviceIdentity
from .hospitals.local_repository import LocalHospitalRepository
from .hospitals.service import HospitalService
from .storage.kv import InMemoryStore, JsonFileStore, KeyValueStore
from .summary.gemini import GeminiTextGenerator
from .summary.service import AttendanceSummarizer
from .sync.connectivity import Connectivity, RemotePingConnectivity, StaticConnectivity
from .sync.mysql_remote import MySQLRemoteStore
from .sync.remote import NullRemoteStore, RemoteStore
from .sync.replicator import CloudReplicator
from .sync.service import SyncService
from .sync.supabase_remote import SupabaseRemoteStore
from .sync.transfer import TransferService
from .users.binding import DeviceBindingAuthenticator
from .users.local_repository import LocalUserRepository
from .users.service import AuthService, UserService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    store: KeyValueStore
    remote: RemoteStore
    connectivity: Connectivity
    replicator: CloudReplicator
    device: DeviceIdentity

    hospitals_repo: LocalHospitalRepository
    users_repo: LocalUserRepository
    attendance_repo: LocalAttendanceRepository

    authenticator: DeviceBindingAuthenticator
    auth_service: AuthService
    user_service: UserService
    hospital_service: HospitalService
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    sync_service: SyncService
    transfer_service: TransferService
    summarizer: AttendanceSummarizer


def _setting(settings: Any, name: str, default: Any = None) -> Any:
    return getattr(settings, name, default)


def build_store(settings: Any) -> KeyValueStore:
    path = _setting(settings, "LOCAL_STORE_PATH", "")
    return JsonFileStore(path) if path else InMemoryStore()


def build_remote(settings: Any) -> RemoteStore:
    backend = str(_setting(settings, "REMOTE_BACKEND", "none") or "none").lower()
    timeout = float(_setting(settings, "REMOTE_TIMEOUT_SECONDS", REMOTE_TIMEOUT_SECONDS))

    if backend == "supabase":
        remote = SupabaseRemoteStore(
            _setting(settings, "SUPABASE_URL", ""),
            _setting(settings, "SUPABASE_KEY", ""),
            timeout=timeout,
        )
        if not remote.is_configured:
            logger.warning("REMOTE_BACKEND=supabase but SUPABASE_URL/SUPABASE_KEY are missing; running local only")
        return remote
    if backend == "mysql":
        db_config = dict(_setting(settings, "DB_CONFIG", {}) or {})
        db_config.setdefault("connection_timeout", int(timeout))
        return MySQLRemoteStore(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    if backend != "none":
        raise ValueError(f"Unknown REMOTE_BACKEND: {backend}")
    return NullRemoteStore()


def build_connectivity(settings: Any, remote: RemoteStore) -> Connectivity:
    if _setting(settings, "FORCE_OFFLINE", False) or not remote.is_configured:
        return StaticConnectivity(online=False)
    return RemotePingConnectivity(remote)


def build_container(
    *,
    settings: Any,
    store: Optional[KeyValueStore] = None,
    remote: Optional[RemoteStore] = None,
    connectivity: Optional[Connectivity] = None,
    executor: Optional[Executor] = None,
) -> Container:
    store = store if store is not None else build_store(settings)
    remote = remote if remote is not None else build_remote(settings)
    connectivity = connectivity if connectivity is not None else build_connectivity(settings, remote)
    replicator = CloudReplicator(remote, connectivity, executor=executor)
    device = DeviceIdentity(store)

    hospitals_repo = LocalHospitalRepository(store, replicator)
    users_repo = LocalUserRepository(store, replicator)
    attendance_repo = LocalAttendanceRepository(store, replicator)

    timeout = float(_setting(settings, "REMOTE_TIMEOUT_SECONDS", REMOTE_TIMEOUT_SECONDS))

    authenticator = DeviceBindingAuthenticator(users_repo, device)
    auth_service = AuthService(users_repo, authenticator)
    user_service = UserService(users_repo, hospitals_repo)
    hospital_service = HospitalService(hospitals_repo, users_repo, attendance_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        hospitals_repo,
        authenticator,
        device,
        device_check_mode=DeviceCheckMode(_setting(settings, "DEVICE_CHECK_MODE", "LOGIN_ONLY")),
    )
    report_service = AttendanceReportService(attendance_repo, strategy_factory=AttendanceStrategyFactory())
    sync_service = SyncService(
        {
            HOSPITALS_TABLE: hospitals_repo.collection,
            USERS_TABLE: users_repo.collection,
            ATTENDANCE_TABLE: attendance_repo.collection,
        },
        remote,
        connectivity,
    )
    transfer_service = TransferService(
        hospitals_repo,
        users_repo,
        attendance_repo,
        merge_policy=ImportMergePolicy(_setting(settings, "IMPORT_MERGE_POLICY", "CHECKOUT_ONLY")),
    )

    api_key = _setting(settings, "GEMINI_API_KEY", "")
    generator = (
        GeminiTextGenerator(api_key, model=_setting(settings, "GEMINI_MODEL", "gemini-2.5-flash"), timeout=timeout)
        if api_key
        else None
    )
    summarizer = AttendanceSummarizer(
        generator, StaticConnectivity(online=not _setting(settings, "FORCE_OFFLINE", False))
    )

    admin_pin = _setting(settings, "ADMIN_PIN", "")
    if admin_pin:
        user_service.ensure_admin(admin_pin)

    return Container(
        store=store,
        remote=remote,
        connectivity=connectivity,
        replicator=replicator,
        device=device,
        hospitals_repo=hospitals_repo,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        authenticator=authenticator,
        auth_service=auth_service,
        user_service=user_service,
        hospital_service=hospital_service,
        attendance_service=attendance_service,
        report_service=report_service,
        sync_service=sync_service,
        transfer_service=transfer_service,
        summarizer=summarizer,
    )
