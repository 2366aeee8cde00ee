import pytest
from werkzeug.security import generate_password_hash

from src.mediguard.mediguard.common.codec import decode_payload, encode_payload
from src.mediguard.mediguard.main import create_app

POSITION = {"latitude": 10.7769, "longitude": 106.7009, "accuracy": 8}


@pytest.fixture
def app(container):
    app = create_app("config.testing", container=container)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def registered(client):
    r = client.post("/api/auth/admin", json={"pin": "9999"})
    assert r.status_code == 200
    r = client.post(
        "/api/hospitals",
        json={
            "name": "City General",
            "registration_number": "REG-001",
            "username": "citygeneral",
            "password": "secret1",
            "log_view_password": "logs1",
            "position": POSITION,
        },
    )
    assert r.status_code == 201, r.get_json()
    hospital_id = r.get_json()["hospital"]["id"]
    r = client.post(f"/api/hospitals/{hospital_id}/staff", json={"name": "Lan", "pin": "4321", "username": "lan"})
    assert r.status_code == 201
    client.post("/api/auth/logout")
    return hospital_id


def test_index_reports_mode(client):
    assert client.get("/").get_json()["mode"] == "LOCAL_ONLY"


def test_endpoints_require_login(client):
    r = client.post("/api/attendance/check-in", json={"position": POSITION})
    assert r.status_code == 401
    assert r.get_json()["success"] is False


def test_wrong_admin_pin(client):
    r = client.post("/api/auth/admin", json={"pin": "0000"})
    assert r.status_code == 401


def test_register_without_position_is_400(client):
    client.post("/api/auth/admin", json={"pin": "9999"})
    r = client.post("/api/hospitals", json={"name": "X", "registration_number": "1", "username": "x", "password": "pass1", "log_view_password": "pass2"})
    assert r.status_code == 400
    assert "not supported" in r.get_json()["message"]


def test_staff_shift_flow(client, registered):
    r = client.post("/api/auth/staff", json={"identifier": "lan", "pin": "4321"})
    assert r.status_code == 200, r.get_json()
    assert r.get_json()["user"]["boundDeviceId"]

    r = client.post("/api/attendance/check-in", json={"position": POSITION})
    assert r.status_code == 201
    assert r.get_json()["record"]["flagged"] is False

    r = client.post("/api/attendance/check-in", json={"position": POSITION})
    assert r.status_code == 400
    assert "active shift" in r.get_json()["message"]

    assert client.get("/api/attendance/active").get_json()["active"] is True

    r = client.post("/api/attendance/check-out", json={"location_error": "Timeout expired"})
    assert r.status_code == 200
    assert "GPS Error" in r.get_json()["warning"]
    assert client.get("/api/attendance/active").get_json()["active"] is False


def test_staff_wrong_pin(client, registered):
    r = client.post("/api/auth/staff", json={"identifier": "lan", "pin": "0000"})
    assert r.status_code == 401


def test_staff_cannot_manage_hospitals(client, registered):
    client.post("/api/auth/staff", json={"identifier": "lan", "pin": "4321"})
    assert client.get("/api/hospitals").status_code == 403


def test_hospital_logs_need_view_password(client, registered):
    r = client.post("/api/auth/hospital", json={"username": "citygeneral", "password": "secret1"})
    assert r.status_code == 200

    assert client.get(f"/api/hospitals/{registered}/report").status_code == 403
    assert client.post(f"/api/hospitals/{registered}/logs/unlock", json={"password": "bad"}).status_code == 403
    assert client.post(f"/api/hospitals/{registered}/logs/unlock", json={"password": "logs1"}).status_code == 200

    r = client.get(f"/api/hospitals/{registered}/report")
    assert r.status_code == 200
    assert r.get_json()["rows"] == []

    r = client.get(f"/api/hospitals/{registered}/report.csv")
    assert r.status_code == 200
    assert r.mimetype == "text/csv"
    assert r.get_data(as_text=True).splitlines()[0] == "date,staff_name,check_in,check_out,duration_minutes,notes"


def test_hospital_cannot_touch_other_hospital(client, registered):
    client.post("/api/auth/hospital", json={"username": "citygeneral", "password": "secret1"})
    assert client.get("/api/hospitals/someone-else").status_code == 403


def test_bad_report_date(client, registered):
    client.post("/api/auth/admin", json={"pin": "9999"})
    r = client.get(f"/api/hospitals/{registered}/report?start=06-01-2025")
    assert r.status_code == 400


def test_summary_without_api_key(client, registered):
    client.post("/api/auth/admin", json={"pin": "9999"})
    r = client.post(f"/api/hospitals/{registered}/summary")
    assert r.status_code == 200
    assert r.get_json()["summary"] == "No attendance records available to analyze."


def test_config_export_and_import_on_fresh_device(client, registered, make_container):
    client.post("/api/auth/admin", json={"pin": "9999"})
    exported = client.get(f"/api/hospitals/{registered}/config").get_json()
    assert "config=" in exported["link"]

    fresh = create_app("config.testing", container=make_container(device_id="device-b-0000-bbbbbb")).test_client()
    r = fresh.post("/api/config/import", json={"payload": exported["payload"]})
    assert r.status_code == 200
    assert r.get_json()["staff_count"] == 1

    r = fresh.post("/api/config/import", json={"payload": "eyJmb28iOjF9"})
    assert r.status_code == 400


def test_batch_import_rejects_corrupt_payload(client, registered):
    client.post("/api/auth/admin", json={"pin": "9999"})
    r = client.post("/api/attendance/import", json={"payload": "eyJmb28iOjF9"})
    assert r.status_code == 400
    assert r.get_json()["success"] is False


def test_sync_pull_local_only(client, registered):
    client.post("/api/auth/admin", json={"pin": "9999"})
    r = client.post("/api/sync/pull")
    assert r.status_code == 200
    assert r.get_json()["mode"] == "LOCAL_ONLY"


def test_anonymous_config_import_cannot_create_admin(client, registered):
    client.post("/api/auth/admin", json={"pin": "9999"})
    payload = decode_payload(client.get(f"/api/hospitals/{registered}/config").get_json()["payload"])
    client.post("/api/auth/logout")

    payload["hospital"]["id"] = "brand-new"
    payload["staff"] = [{"id": "evil", "name": "Evil", "role": "ADMIN", "pinHash": generate_password_hash("0000")}]
    r = client.post("/api/config/import", json={"payload": encode_payload(payload)})
    assert r.status_code == 400

    r = client.post("/api/auth/admin", json={"pin": "0000"})
    assert r.status_code == 401


def test_anonymous_config_import_cannot_replace_hospital(client, registered):
    client.post("/api/auth/admin", json={"pin": "9999"})
    exported = client.get(f"/api/hospitals/{registered}/config").get_json()["payload"]
    client.post("/api/auth/logout")

    assert client.post("/api/config/import", json={"payload": exported}).status_code == 403

    client.post("/api/auth/hospital", json={"username": "citygeneral", "password": "secret1"})
    assert client.post("/api/config/import", json={"payload": exported}).status_code == 200
