from __future__ import annotations

from flask import Flask, session

from ..common.datetime_utils import to_iso
from ..common.web import (
    SESSION_ADMIN,
    SESSION_HOSPITAL,
    api_view,
    json_body,
    ok,
    position_from_request,
    roles_required,
)
from ..container import Container
from ..core.exceptions import AuthorizationError
from .model import Hospital


def hospital_to_json(h: Hospital) -> dict:
    config = h.email_report_config
    return {
        "id": h.id,
        "name": h.name,
        "registrationNumber": h.registration_number,
        "loginUsername": h.login_username,
        "coords": h.coords.to_dict(),
        "radius": h.radius,
        "emailReportConfig": config.to_dict() if config else None,
    }


def register(app: Flask, container: Container) -> None:
    def require_own(hospital_id: str) -> None:
        if session.get("role") == SESSION_HOSPITAL and session.get("hospital_id") != hospital_id:
            raise AuthorizationError("You can only manage your own hospital")

    @app.route("/api/hospitals", methods=["GET"], endpoint="list_hospitals")
    @roles_required({SESSION_ADMIN})
    @api_view
    def list_hospitals():
        return ok(hospitals=[hospital_to_json(h) for h in container.hospital_service.list_all()])

    @app.route("/api/hospitals", methods=["POST"], endpoint="register_hospital")
    @roles_required({SESSION_ADMIN})
    @api_view
    def register_hospital():
        data = json_body()
        hospital = container.hospital_service.register(
            name=data.get("name", ""),
            registration_number=data.get("registration_number", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            log_view_password=data.get("log_view_password", ""),
            provider=position_from_request(data),
        )
        return ok(201, hospital=hospital_to_json(hospital))

    @app.route("/api/hospitals/<hospital_id>", methods=["GET"], endpoint="get_hospital")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def get_hospital(hospital_id: str):
        require_own(hospital_id)
        return ok(hospital=hospital_to_json(container.hospital_service.get(hospital_id)))

    @app.route("/api/hospitals/<hospital_id>", methods=["PUT"], endpoint="update_hospital")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def update_hospital(hospital_id: str):
        require_own(hospital_id)
        data = json_body()
        hospital = container.hospital_service.update_identity(
            hospital_id,
            name=data.get("name", ""),
            registration_number=data.get("registration_number", ""),
            username=data.get("username", ""),
            password=data.get("password") or None,
            log_view_password=data.get("log_view_password") or None,
        )
        return ok(hospital=hospital_to_json(hospital))

    @app.route("/api/hospitals/<hospital_id>/geofence", methods=["POST"], endpoint="recapture_geofence")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def recapture_geofence(hospital_id: str):
        require_own(hospital_id)
        data = json_body()
        hospital = container.hospital_service.recapture_geofence(
            hospital_id, position_from_request(data), radius=data.get("radius")
        )
        return ok(hospital=hospital_to_json(hospital))

    @app.route("/api/hospitals/<hospital_id>", methods=["DELETE"], endpoint="delete_hospital")
    @roles_required({SESSION_ADMIN})
    @api_view
    def delete_hospital(hospital_id: str):
        container.hospital_service.delete_hospital(hospital_id)
        return ok(message="Hospital and all associated data deleted")

    @app.route("/api/hospitals/<hospital_id>/logs/unlock", methods=["POST"], endpoint="unlock_logs")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def unlock_logs(hospital_id: str):
        require_own(hospital_id)
        if session.get("role") != SESSION_ADMIN:
            container.hospital_service.verify_log_view_password(hospital_id, json_body().get("password", ""))
        session["logs_unlocked"] = hospital_id
        return ok(message="Logs unlocked")

    @app.route("/api/hospitals/<hospital_id>/email-config", methods=["PUT"], endpoint="save_email_config")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def save_email_config(hospital_id: str):
        require_own(hospital_id)
        hospital = container.hospital_service.save_email_config(
            hospital_id, recipient_email=json_body().get("recipient_email", "")
        )
        return ok(hospital=hospital_to_json(hospital))

    @app.route("/api/hospitals/<hospital_id>/email-report", methods=["GET"], endpoint="email_report_status")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def email_report_status(hospital_id: str):
        require_own(hospital_id)
        hospital = container.hospital_service.get(hospital_id)
        config = hospital.email_report_config
        return ok(
            due=container.hospital_service.is_report_due(hospital),
            last_report_date=to_iso(config.last_report_date) if config else None,
        )

    @app.route("/api/hospitals/<hospital_id>/email-report/sent", methods=["POST"], endpoint="mark_report_sent")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def mark_report_sent(hospital_id: str):
        require_own(hospital_id)
        hospital = container.hospital_service.mark_report_sent(hospital_id)
        return ok(hospital=hospital_to_json(hospital))
