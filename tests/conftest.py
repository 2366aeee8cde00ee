from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest

from src.mediguard.mediguard.container import build_container
from src.mediguard.mediguard.core.constants import DEVICE_ID_KEY
from src.mediguard.mediguard.core.exceptions import RemoteUnreachable
from src.mediguard.mediguard.geo.location import SubmittedPositionProvider
from src.mediguard.mediguard.geo.model import Coordinate
from src.mediguard.mediguard.storage.kv import InMemoryStore
from src.mediguard.mediguard.sync.connectivity import StaticConnectivity
from src.mediguard.mediguard.sync.replicator import ImmediateExecutor

CENTER = Coordinate(10.7769, 106.7009)
DEVICE_A = "device-a-0000-aaaaaa"
DEVICE_B = "device-b-0000-bbbbbb"


class FakeRemote:
    """In-memory remote tables keyed by id; `down` makes every call fail."""

    def __init__(self, tables=None, *, configured=True):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.is_configured = configured
        self.down = False
        self.failing_tables: set[str] = set()

    def _check(self, table):
        if self.down or table in self.failing_tables:
            raise RemoteUnreachable(f"{table} unreachable")

    def ping(self):
        return not self.down

    def select_all(self, table):
        self._check(table)
        return [dict(r) for r in self.tables.get(table, [])]

    def upsert(self, table, row):
        self._check(table)
        rows = [r for r in self.tables.get(table, []) if r["id"] != row["id"]]
        rows.append(dict(row))
        self.tables[table] = rows

    def delete_by_id(self, table, row_id):
        self.delete_where(table, "id", row_id)

    def delete_where(self, table, column, value):
        self._check(table)
        self.tables[table] = [r for r in self.tables.get(table, []) if r.get(column) != value]


def make_settings(**overrides):
    values = dict(
        LOCAL_STORE_PATH="",
        REMOTE_BACKEND="none",
        REMOTE_TIMEOUT_SECONDS=1.0,
        FORCE_OFFLINE=False,
        DEVICE_CHECK_MODE="LOGIN_ONLY",
        IMPORT_MERGE_POLICY="CHECKOUT_ONLY",
        ADMIN_PIN="9999",
        GEMINI_API_KEY="",
        GEMINI_MODEL="gemini-2.5-flash",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def fixed_now():
    # Monday, local time.
    return datetime(2025, 1, 6, 7, 55).astimezone()


@pytest.fixture
def at_center():
    return SubmittedPositionProvider(CENTER)


@pytest.fixture
def make_container():
    def factory(*, store=None, remote=None, online=True, device_id=DEVICE_A, **overrides):
        store = store if store is not None else InMemoryStore()
        if device_id:
            store.set(DEVICE_ID_KEY, device_id)
        return build_container(
            settings=make_settings(**overrides),
            store=store,
            remote=remote,
            connectivity=StaticConnectivity(online=online) if remote is not None else None,
            executor=ImmediateExecutor(),
        )

    return factory


@pytest.fixture
def container(make_container):
    return make_container()


@pytest.fixture
def hospital(container, at_center):
    return container.hospital_service.register(
        name="City General",
        registration_number="REG-001",
        username="citygeneral",
        password="secret1",
        log_view_password="logs1",
        provider=at_center,
    )


@pytest.fixture
def nurse(container, hospital):
    return container.user_service.create_staff(hospital_id=hospital.id, name="Lan", pin="4321", username="lan")


def switch_device(container, device_id):
    container.store.set(DEVICE_ID_KEY, device_id)


@pytest.fixture
def use_device(container):
    return lambda device_id: switch_device(container, device_id)


@pytest.fixture
def fake_remote():
    return FakeRemote()
