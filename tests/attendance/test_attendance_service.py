from datetime import timedelta

import pytest

from src.mediguard.mediguard.core.enums import Anomaly
from src.mediguard.mediguard.core.exceptions import (
    AccountBoundElsewhere,
    LocationUnavailable,
    NoActiveShift,
    ShiftAlreadyActive,
    ValidationError,
)
from src.mediguard.mediguard.geo.location import SubmittedPositionProvider
from src.mediguard.mediguard.geo.model import Coordinate

CENTER = Coordinate(10.7769, 106.7009)
DEVICE_A = "device-a-0000-aaaaaa"
DEVICE_B = "device-b-0000-bbbbbb"


def at(lat_offset=0.0):
    return SubmittedPositionProvider(Coordinate(CENTER.latitude + lat_offset, CENTER.longitude))


def test_check_in_inside_geofence(container, hospital, nurse, fixed_now):
    result = container.attendance_service.check_in(nurse, hospital, at(0.0001), now=fixed_now)

    r = result.record
    assert result.warning is None
    assert r.is_open
    assert r.flagged is False
    assert r.check_in_time == fixed_now
    assert r.check_in_device_id == DEVICE_A
    assert r.hospital_name == "City General"
    assert container.attendance_service.get_active_record(nurse.id).id == r.id


def test_check_in_500m_away_is_flagged_with_warning(container, hospital, nurse, fixed_now):
    result = container.attendance_service.check_in(nurse, hospital, at(0.0045), now=fixed_now)

    assert result.record.flagged is True
    assert result.record.distance_from_center == pytest.approx(500.4, abs=1.0)
    assert "500m away" in result.warning


def test_check_in_binds_unbound_account(container, hospital, nurse, fixed_now):
    container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now)
    assert container.users_repo.get_by_id(nurse.id).bound_device_id == DEVICE_A


def test_double_check_in_rejected(container, hospital, nurse, fixed_now):
    container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now)

    with pytest.raises(ShiftAlreadyActive):
        container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now + timedelta(minutes=5))

    assert len(container.attendance_service.get_history(nurse.id)) == 1


def test_check_in_without_location_saves_nothing(container, hospital, nurse, fixed_now):
    with pytest.raises(LocationUnavailable):
        container.attendance_service.check_in(nurse, hospital, SubmittedPositionProvider(None), now=fixed_now)

    assert container.attendance_service.get_active_record(nurse.id) is None


def test_check_in_at_wrong_hospital(container, hospital, nurse, at_center, fixed_now):
    other = container.hospital_service.register(
        name="Riverside",
        registration_number="REG-002",
        username="riverside",
        password="secret2",
        log_view_password="logs2",
        provider=at_center,
    )
    with pytest.raises(ValidationError):
        container.attendance_service.check_in(nurse, other, at(), now=fixed_now)


def test_check_out_computes_duration(container, hospital, nurse, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now).record
    result = container.attendance_service.check_out(rec, nurse, at(), now=fixed_now + timedelta(hours=8, seconds=40))

    assert result.warning is None
    assert result.record.duration_minutes == 481
    assert result.record.check_out_device_id == DEVICE_A
    assert result.record.check_out_coords is not None
    assert container.attendance_service.get_active_record(nurse.id) is None


def test_half_minute_duration_rounds_up(container, hospital, nurse, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now).record
    result = container.attendance_service.check_out(rec, nurse, at(), now=fixed_now + timedelta(hours=8, seconds=30))
    assert result.record.duration_minutes == 481


def test_check_out_without_gps_still_closes_shift(container, hospital, nurse, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now).record
    result = container.attendance_service.check_out(
        rec, nurse, SubmittedPositionProvider(None), now=fixed_now + timedelta(minutes=90)
    )

    assert result.record.check_out_time is not None
    assert result.record.check_out_coords is None
    assert result.record.duration_minutes == 90
    assert result.warning == "Shift ended without location verification (GPS Error). Duration: 90 mins."


def test_flag_accumulates_from_check_out(container, hospital, nurse, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now).record
    result = container.attendance_service.check_out(rec, nurse, at(0.0045), now=fixed_now + timedelta(hours=1))

    assert result.record.flagged is True
    assert "flagged" in result.warning


def test_flag_is_never_cleared_by_check_out(container, hospital, nurse, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(0.0045), now=fixed_now).record
    result = container.attendance_service.check_out(rec, nurse, at(), now=fixed_now + timedelta(hours=1))
    assert result.record.flagged is True


def test_check_out_from_other_device_marks_anomaly(container, hospital, nurse, use_device, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now).record
    use_device(DEVICE_B)

    result = container.attendance_service.check_out(rec, nurse, at(), now=fixed_now + timedelta(hours=1))

    assert result.record.anomaly == Anomaly.DEVICE_MISMATCH
    assert result.record.check_out_device_id == DEVICE_B


def test_strict_mode_rejects_other_device(make_container, at_center, use_device, fixed_now):
    c = make_container(DEVICE_CHECK_MODE="STRICT")
    h = c.hospital_service.register(
        name="City General",
        registration_number="REG-001",
        username="citygeneral",
        password="secret1",
        log_view_password="logs1",
        provider=at_center,
    )
    u = c.user_service.create_staff(hospital_id=h.id, name="Lan", pin="4321", username="lan")
    rec = c.attendance_service.check_in(u, h, at_center, now=fixed_now).record
    c.store.set("mediguard_device_id", DEVICE_B)

    with pytest.raises(AccountBoundElsewhere):
        c.attendance_service.check_out(rec, u, at_center, now=fixed_now + timedelta(hours=1))
    assert c.attendance_service.get_active_record(u.id) is not None


def test_backward_clock_clamps_duration(container, hospital, nurse, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now).record
    result = container.attendance_service.check_out(rec, nurse, at(), now=fixed_now - timedelta(minutes=10))
    assert result.record.duration_minutes == 0


def test_check_out_user_without_shift(container, nurse):
    with pytest.raises(NoActiveShift):
        container.attendance_service.check_out_user(nurse, None)


def test_closed_shift_cannot_be_closed_again(container, hospital, nurse, fixed_now):
    rec = container.attendance_service.check_in(nurse, hospital, at(), now=fixed_now).record
    closed = container.attendance_service.check_out(rec, nurse, at(), now=fixed_now + timedelta(hours=1)).record
    with pytest.raises(ValidationError):
        container.attendance_service.check_out(closed, nurse, at(), now=fixed_now + timedelta(hours=2))


def test_history_is_newest_first(container, hospital, nurse, fixed_now):
    svc = container.attendance_service
    for day in range(3):
        start = fixed_now + timedelta(days=day)
        rec = svc.check_in(nurse, hospital, at(), now=start).record
        svc.check_out(rec, nurse, at(), now=start + timedelta(hours=8))

    history = svc.get_history(nurse.id, limit=2)
    assert len(history) == 2
    assert history[0].check_in_time > history[1].check_in_time
