from __future__ import annotations

import csv
import io
from datetime import date
from typing import Optional

from flask import Flask, Response, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.web import (
    SESSION_ADMIN,
    SESSION_HOSPITAL,
    SESSION_STAFF,
    api_view,
    json_body,
    ok,
    position_from_request,
    roles_required,
)
from ..container import Container
from ..core.exceptions import AuthorizationError, ValidationError
from .model import AttendanceRecord

CSV_COLUMNS = ["date", "staff_name", "check_in", "check_out", "duration_minutes", "notes"]


def record_to_json(record: Optional[AttendanceRecord]) -> Optional[dict]:
    return record.to_row() if record else None


def _date_arg(name: str) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} date (expected YYYY-MM-DD)") from None


def register(app: Flask, container: Container) -> None:
    def current_staff():
        user = container.user_service.get(session["user_id"])
        if not user.hospital_id:
            raise ValidationError("Account is not assigned to a hospital")
        return user

    def require_logs(hospital_id: str) -> None:
        role = session.get("role")
        if role == SESSION_ADMIN:
            return
        if session.get("hospital_id") != hospital_id:
            raise AuthorizationError("You can only view your own hospital's logs")
        if session.get("logs_unlocked") != hospital_id:
            raise AuthorizationError("Enter the log view password to see attendance logs")

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="check_in")
    @roles_required({SESSION_STAFF})
    @api_view
    def check_in():
        user = current_staff()
        hospital = container.hospital_service.get(user.hospital_id)
        result = container.attendance_service.check_in(user, hospital, position_from_request(json_body()))
        return ok(201, record=record_to_json(result.record), warning=result.warning)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="check_out")
    @roles_required({SESSION_STAFF})
    @api_view
    def check_out():
        user = current_staff()
        result = container.attendance_service.check_out_user(user, position_from_request(json_body()))
        return ok(record=record_to_json(result.record), warning=result.warning)

    @app.route("/api/attendance/active", methods=["GET"], endpoint="active_shift")
    @roles_required({SESSION_STAFF})
    @api_view
    def active_shift():
        record = container.attendance_service.get_active_record(session["user_id"])
        return ok(active=record is not None, record=record_to_json(record))

    @app.route("/api/attendance/history", methods=["GET"], endpoint="history")
    @roles_required({SESSION_STAFF})
    @api_view
    def history():
        limit = request.args.get("limit", default=15, type=int)
        records = container.attendance_service.get_history(session["user_id"], limit=max(1, min(limit, 100)))
        return ok(records=[record_to_json(r) for r in records])

    @app.route("/api/hospitals/<hospital_id>/report", methods=["GET"], endpoint="report")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def report(hospital_id: str):
        require_logs(hospital_id)
        data = container.report_service.build_report(
            hospital_id,
            start=_date_arg("start"),
            end=_date_arg("end"),
            user_id=request.args.get("user_id") or None,
        )
        return ok(rows=[r.to_dict() for r in data.rows], summary=data.summary)

    @app.route("/api/hospitals/<hospital_id>/report.csv", methods=["GET"], endpoint="report_csv")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def report_csv(hospital_id: str):
        require_logs(hospital_id)
        data = container.report_service.build_report(
            hospital_id,
            start=_date_arg("start"),
            end=_date_arg("end"),
            user_id=request.args.get("user_id") or None,
        )

        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for row in data.rows:
            values = row.to_dict()
            values["notes"] = "; ".join(row.notes)
            writer.writerow(values)

        filename = f"attendance_{hospital_id}_{date.today().isoformat()}.csv"
        return Response(
            buf.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/hospitals/<hospital_id>/summary", methods=["POST"], endpoint="summary")
    @roles_required({SESSION_ADMIN, SESSION_HOSPITAL})
    @api_view
    def summary(hospital_id: str):
        require_logs(hospital_id)
        if request.args.get("start") or request.args.get("end"):
            records = container.report_service.list_records(
                hospital_id, start=_date_arg("start"), end=_date_arg("end")
            )
        else:
            records = container.report_service.records_for_weekly_report(hospital_id)
        return ok(summary=container.summarizer.summarize(records), record_count=len(records))
