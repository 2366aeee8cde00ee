import pytest

from src.mediguard.mediguard.core.enums import Role
from src.mediguard.mediguard.core.exceptions import UserNotFound, ValidationError


def test_create_staff_hashes_pin(container, hospital):
    user = container.user_service.create_staff(hospital_id=hospital.id, name="  Hoa ", pin="5678")
    assert user.name == "Hoa"
    assert user.role == Role.STAFF
    assert user.pin_hash and user.pin_hash != "5678"


@pytest.mark.parametrize("pin", ["", "12", "12ab"])
def test_create_staff_rejects_bad_pin(container, hospital, pin):
    with pytest.raises(ValidationError):
        container.user_service.create_staff(hospital_id=hospital.id, name="Hoa", pin=pin)


def test_create_staff_requires_known_hospital(container):
    with pytest.raises(ValidationError, match="Hospital not found"):
        container.user_service.create_staff(hospital_id="nope", name="Hoa", pin="1234")


def test_duplicate_username_rejected(container, hospital, nurse):
    with pytest.raises(ValidationError, match="already exists"):
        container.user_service.create_staff(hospital_id=hospital.id, name="Other", pin="1234", username="lan")


def test_list_staff_excludes_admin(container, hospital, nurse):
    assert [u.id for u in container.user_service.list_staff(hospital.id)] == [nurse.id]


def test_delete_staff(container, nurse):
    container.user_service.delete_staff(nurse.id)
    with pytest.raises(UserNotFound):
        container.user_service.get(nurse.id)


def test_admin_cannot_be_deleted(container):
    admin = container.auth_service.login_admin("9999")
    with pytest.raises(ValidationError):
        container.user_service.delete_staff(admin.id)


def test_ensure_admin_is_idempotent(container):
    first = container.user_service.ensure_admin("9999")
    second = container.user_service.ensure_admin("1111")
    assert first.id == second.id
    assert len([u for u in container.users_repo.list_all() if u.is_admin]) == 1
