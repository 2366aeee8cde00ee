import threading

from src.mediguard.mediguard.core.constants import ATTENDANCE_TABLE, HOSPITALS_TABLE, USERS_TABLE
from src.mediguard.mediguard.core.enums import SyncMode
from src.mediguard.mediguard.storage.collection import LocalCollection
from src.mediguard.mediguard.sync.mapping import from_remote, to_remote


def _register(c, provider):
    return c.hospital_service.register(
        name="City General",
        registration_number="REG-001",
        username="citygeneral",
        password="secret1",
        log_view_password="logs1",
        provider=provider,
    )


def test_local_only_without_remote(container):
    result = container.sync_service.pull_and_reconcile()
    assert result.success
    assert result.mode == SyncMode.LOCAL_ONLY
    assert result.message == "Local Mode Only"


def test_offline_is_not_a_failure(make_container, fake_remote):
    c = make_container(remote=fake_remote, online=False)
    result = c.sync_service.pull_and_reconcile()
    assert result.success
    assert result.mode == SyncMode.OFFLINE
    assert result.message == "Offline"


def test_empty_remote_is_seeded_from_local(make_container, fake_remote, at_center):
    # Offline while creating data, then reconcile once the remote is reachable.
    c = make_container(remote=fake_remote, online=False)
    hospital = _register(c, at_center)
    c.user_service.create_staff(hospital_id=hospital.id, name="Lan", pin="4321", username="lan")

    online = make_container(store=c.store, remote=fake_remote, online=True, device_id=None)
    result = online.sync_service.pull_and_reconcile()

    assert result.success
    assert result.pushed[HOSPITALS_TABLE] == 1
    assert {r["id"] for r in fake_remote.tables[HOSPITALS_TABLE]} == {hospital.id}
    assert fake_remote.tables[HOSPITALS_TABLE][0]["login_username"] == "citygeneral"


def test_remote_snapshot_replaces_local(make_container, fake_remote, at_center):
    first = make_container(remote=fake_remote)
    hospital = _register(first, at_center)
    first.user_service.create_staff(hospital_id=hospital.id, name="Lan", pin="4321", username="lan")

    second = make_container(remote=fake_remote, device_id="device-b-0000-bbbbbb")
    result = second.sync_service.pull_and_reconcile()

    assert result.success
    assert second.hospital_service.get(hospital.id).name == "City General"
    assert [u.username for u in second.user_service.list_staff(hospital.id)] == ["lan"]


def test_reconcile_is_idempotent(make_container, fake_remote, at_center):
    c = make_container(remote=fake_remote)
    _register(c, at_center)

    c.sync_service.pull_and_reconcile()
    snapshot = {k: c.store.get(k) for k in ("mediguard_hospitals", "mediguard_users", "mediguard_attendance")}
    c.sync_service.pull_and_reconcile()

    assert {k: c.store.get(k) for k in snapshot} == snapshot


def test_failed_table_is_left_untouched(make_container, fake_remote, at_center):
    c = make_container(remote=fake_remote)
    hospital = _register(c, at_center)
    fake_remote.failing_tables.add(USERS_TABLE)
    local_users = c.store.get("mediguard_users")

    result = c.sync_service.pull_and_reconcile()

    assert result.success is False
    assert "users" in result.message
    assert c.store.get("mediguard_users") == local_users
    assert c.hospital_service.get(hospital.id)


def test_replication_failure_keeps_local_write(make_container, fake_remote, at_center):
    c = make_container(remote=fake_remote)
    fake_remote.down = True

    hospital = _register(c, at_center)

    assert c.hospital_service.get(hospital.id)
    assert c.replicator.failed_pushes == 1
    assert c.replicator.last_error


def test_mapping_round_trip_keeps_fields():
    local = {
        "id": "r1",
        "userId": "u1",
        "userName": "Lan",
        "hospitalId": "h1",
        "hospitalName": "City General",
        "checkInTime": "2025-01-06T07:55:00+00:00",
        "checkInCoords": {"latitude": 1.0, "longitude": 2.0},
        "flagged": True,
        "distanceFromCenter": 12.5,
    }
    remote = to_remote(ATTENDANCE_TABLE, local)
    assert remote["check_in_coords"] == {"latitude": 1.0, "longitude": 2.0}
    assert remote["check_out_time"] is None
    assert from_remote(ATTENDANCE_TABLE, remote) == local


def test_unexpected_table_error_is_reported_not_raised(make_container, fake_remote, at_center):
    c = make_container(remote=fake_remote)
    _register(c, at_center)
    original = fake_remote.select_all

    def select_all(table):
        if table == USERS_TABLE:
            raise KeyError("user_id")
        return original(table)

    fake_remote.select_all = select_all
    result = c.sync_service.pull_and_reconcile()

    assert result.success is False
    assert result.message == "Sync failed: users"
    assert result.pulled[HOSPITALS_TABLE] == 1


def test_seeding_push_does_not_block_local_writes(make_container, fake_remote, at_center):
    c = make_container(remote=fake_remote, online=False)
    _register(c, at_center)
    online = make_container(store=c.store, remote=fake_remote, online=True, device_id=None)
    scratch = LocalCollection(c.store, "scratch")
    blocked = []
    original = fake_remote.upsert

    def upsert(table, row):
        writer = threading.Thread(target=scratch.upsert, args=({"id": row["id"]},))
        writer.start()
        writer.join(timeout=1.0)
        blocked.append(writer.is_alive())
        original(table, row)

    fake_remote.upsert = upsert
    result = online.sync_service.pull_and_reconcile()

    assert result.success
    assert blocked and not any(blocked)
