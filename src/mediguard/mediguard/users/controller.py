from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, session

from ..common.web import (
    SESSION_ADMIN,
    SESSION_HOSPITAL,
    SESSION_STAFF,
    api_view,
    fail,
    json_body,
    ok,
    roles_required,
    scoped_hospital_id,
)
from ..container import Container
from ..core.exceptions import AuthorizationError
from .model import StaffUser

logger = logging.getLogger(__name__)


def staff_to_json(user: StaffUser) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role.value,
        "hospitalId": user.hospital_id,
        "username": user.username,
        "boundDeviceId": user.bound_device_id,
        "profilePicture": user.profile_picture,
    }


def register(app: Flask, container: Container) -> None:
    def start_session(*, role: str, user_id: str | None, name: str, hospital_id: str | None, remember: bool) -> None:
        session.clear()
        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=7)
        session["role"] = role
        session["user_id"] = user_id
        session["name"] = name
        session["hospital_id"] = hospital_id

    def own_staff(user_id: str) -> StaffUser:
        user = container.user_service.get(user_id)
        if session.get("role") == SESSION_HOSPITAL and user.hospital_id != session.get("hospital_id"):
            raise AuthorizationError("Staff member belongs to another hospital")
        return user

    @app.route("/api/auth/admin", methods=["POST"], endpoint="login_admin")
    @api_view
    def login_admin():
        data = json_body()
        admin = container.auth_service.login_admin(str(data.get("pin", "")))
        start_session(role=SESSION_ADMIN, user_id=admin.id, name=admin.name, hospital_id=None, remember=False)
        return ok(user=staff_to_json(admin))

    @app.route("/api/auth/hospital", methods=["POST"], endpoint="login_hospital")
    @api_view
    def login_hospital():
        data = json_body()
        hospital = container.hospital_service.authenticate(data.get("username", ""), data.get("password", ""))
        start_session(
            role=SESSION_HOSPITAL,
            user_id=None,
            name=hospital.name,
            hospital_id=hospital.id,
            remember=bool(data.get("remember_me")),
        )
        return ok(hospital={"id": hospital.id, "name": hospital.name})

    @app.route("/api/auth/staff", methods=["POST"], endpoint="login_staff")
    @api_view
    def login_staff():
        data = json_body()
        identifier = str(data.get("identifier", "")).strip()
        if not identifier:
            return fail("Username or ID is required")

        user = container.authenticator.resolve(identifier)
        if user.pin_hash:
            result = container.auth_service.login_with_pin(user.id, str(data.get("pin", "")))
        else:
            result = container.auth_service.login(identifier)

        u = result.user
        role = SESSION_ADMIN if u.is_admin else SESSION_STAFF
        start_session(role=role, user_id=u.id, name=u.name, hospital_id=u.hospital_id, remember=bool(data.get("remember_me")))
        logger.info("Staff login: %s", u.id)
        return ok(user=staff_to_json(u))

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL, SESSION_STAFF})
    def me():
        return ok(
            role=session.get("role"),
            user_id=session.get("user_id"),
            name=session.get("name"),
            hospital_id=session.get("hospital_id"),
            device_id=container.device.get_or_create_device_id(),
        )

    @app.route("/api/hospitals/<hospital_id>/staff", methods=["GET"], endpoint="list_staff")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def list_staff(hospital_id: str):
        hospital_id = scoped_hospital_id(hospital_id) or hospital_id
        staff = container.user_service.list_staff(hospital_id)
        return ok(staff=[staff_to_json(u) for u in staff])

    @app.route("/api/hospitals/<hospital_id>/staff", methods=["POST"], endpoint="add_staff")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def add_staff(hospital_id: str):
        data = json_body()
        user = container.user_service.create_staff(
            hospital_id=scoped_hospital_id(hospital_id) or hospital_id,
            name=data.get("name", ""),
            pin=str(data.get("pin", "")),
            username=data.get("username"),
        )
        return ok(201, user=staff_to_json(user))

    @app.route("/api/staff/<user_id>", methods=["DELETE"], endpoint="delete_staff")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def delete_staff(user_id: str):
        own_staff(user_id)
        container.user_service.delete_staff(user_id)
        return ok(message="Staff member removed")

    @app.route("/api/staff/<user_id>/reset-device", methods=["POST"], endpoint="reset_device")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def reset_device(user_id: str):
        own_staff(user_id)
        user = container.user_service.reset_device_binding(user_id)
        return ok(user=staff_to_json(user))
