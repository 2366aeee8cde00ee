from __future__ import annotations

from flask import Flask, request, session

from ..common.web import (
    SESSION_ADMIN,
    SESSION_HOSPITAL,
    SESSION_STAFF,
    api_view,
    fail,
    json_body,
    ok,
    roles_required,
)
from ..container import Container
from ..core.exceptions import AuthorizationError
from .service import SyncResult


def sync_result_to_json(result: SyncResult) -> dict:
    return {
        "success": result.success,
        "message": result.message,
        "mode": result.mode.value,
        "pulled": result.pulled,
        "pushed": result.pushed,
    }


def register(app: Flask, container: Container) -> None:
    def require_own(hospital_id: str) -> None:
        if session.get("role") == SESSION_HOSPITAL and session.get("hospital_id") != hospital_id:
            raise AuthorizationError("You can only export your own hospital's data")

    @app.route("/api/sync/status", methods=["GET"], endpoint="sync_status")
    @api_view
    def sync_status():
        return ok(
            mode=container.sync_service.mode().value,
            failed_pushes=container.replicator.failed_pushes,
            last_error=container.replicator.last_error,
        )

    @app.route("/api/sync/pull", methods=["POST"], endpoint="sync_pull")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL, SESSION_STAFF})
    @api_view
    def sync_pull():
        result = container.sync_service.pull_and_reconcile()
        return sync_result_to_json(result), 200 if result.success else 502

    @app.route("/api/hospitals/<hospital_id>/attendance/export", methods=["GET"], endpoint="export_batch")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def export_batch(hospital_id: str):
        require_own(hospital_id)
        payload = container.transfer_service.export_batch(hospital_id, request.args.get("user_id") or None)
        return ok(payload=payload)

    @app.route("/api/attendance/import", methods=["POST"], endpoint="import_batch")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def import_batch():
        payload = str(json_body().get("payload", "")).strip()
        if not payload:
            return fail("Payload is required")
        result = container.transfer_service.import_batch(payload)
        return ok(imported_count=result.imported_count, skipped_count=result.skipped_count)

    @app.route("/api/hospitals/<hospital_id>/config", methods=["GET"], endpoint="export_config")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def export_config(hospital_id: str):
        require_own(hospital_id)
        return ok(
            payload=container.transfer_service.export_config(hospital_id),
            link=container.transfer_service.build_config_link(hospital_id, request.host_url),
        )

    @app.route("/api/config/import", methods=["POST"], endpoint="import_config")
    @api_view
    def import_config():
        # Open to unauthenticated devices for hospitals not yet on this device.
        payload = str(json_body().get("payload") or request.args.get("config") or "").strip()
        if not payload:
            return fail("Payload is required")
        result = container.transfer_service.import_config(
            payload,
            is_admin=session.get("role") == SESSION_ADMIN,
            session_hospital_id=session.get("hospital_id") if session.get("role") == SESSION_HOSPITAL else None,
        )
        return ok(
            hospital_id=result.hospital_id,
            hospital_name=result.hospital_name,
            staff_count=result.staff_count,
            message=f"Setup Complete! Configuration for {result.hospital_name} loaded.",
        )
