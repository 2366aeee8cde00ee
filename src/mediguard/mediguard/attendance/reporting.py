from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEVICE_SUFFIX_LENGTH, REPORT_INTERVAL_DAYS
from ..core.enums import Anomaly, TimeStatus
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .strategies.base import DeadlinePolicy


@dataclass(frozen=True)
class ReportRow:
    """Read-model consumed by document generators (one row per record)."""

    record_id: str
    user_id: str
    staff_name: str
    work_date: str
    check_in: str
    check_in_status: TimeStatus
    check_out: str
    check_out_status: TimeStatus
    duration_minutes: Optional[int]
    flagged: bool
    anomaly: Optional[Anomaly]
    notes: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "user_id": self.user_id,
            "staff_name": self.staff_name,
            "date": self.work_date,
            "check_in": f"{self.check_in} ({self.check_in_status.value})",
            "check_out": f"{self.check_out} ({self.check_out_status.value})",
            "duration_minutes": self.duration_minutes if self.duration_minutes is not None else "N/A",
            "flagged": self.flagged,
            "anomaly": self.anomaly.value if self.anomaly else None,
            "notes": "\n".join(self.notes),
        }


@dataclass(frozen=True)
class ReportData:
    rows: list[ReportRow]
    summary: list[dict]


def record_notes(record: AttendanceRecord) -> tuple[str, ...]:
    notes = []
    if record.flagged:
        notes.append(f"Location Flagged ({round(record.distance_from_center)}m)")
    if record.anomaly == Anomaly.DEVICE_MISMATCH:
        notes.append("DEVICE MISMATCH!")
    notes.append(f"Device: ...{(record.check_in_device_id or '')[-DEVICE_SUFFIX_LENGTH:]}")
    return tuple(notes)


class AttendanceReportService:
    """Builds annotated report rows.

    Punctuality is derived when the report is built, from the policy in
    effect now, so changing the policy relabels historical records.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        policy: Optional[DeadlinePolicy] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._policy = policy or DeadlinePolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @property
    def policy(self) -> DeadlinePolicy:
        return self._policy

    def check_in_status(self, record: AttendanceRecord) -> TimeStatus:
        strategy = self._factory.for_checkin(at=record.check_in_time, policy=self._policy)
        return strategy.decide_checkin(at=record.check_in_time, policy=self._policy).status

    def check_out_status(self, record: AttendanceRecord) -> TimeStatus:
        if record.check_out_time is None:
            return TimeStatus.NOT_AVAILABLE
        strategy = self._factory.for_checkout(at=record.check_out_time, policy=self._policy)
        return strategy.decide_checkout(at=record.check_out_time, policy=self._policy).status

    def is_late(self, record: AttendanceRecord) -> bool:
        return self.check_in_status(record) == TimeStatus.LATE

    def is_early_leave(self, record: AttendanceRecord) -> bool:
        return self.check_out_status(record) == TimeStatus.EARLY

    def to_row(self, record: AttendanceRecord) -> ReportRow:
        check_in = record.check_in_time.astimezone()
        check_out = record.check_out_time.astimezone() if record.check_out_time else None
        return ReportRow(
            record_id=record.id,
            user_id=record.user_id,
            staff_name=record.user_name,
            work_date=check_in.strftime("%Y-%m-%d"),
            check_in=check_in.strftime("%H:%M"),
            check_in_status=self.check_in_status(record),
            check_out=check_out.strftime("%H:%M") if check_out else "N/A",
            check_out_status=self.check_out_status(record),
            duration_minutes=record.duration_minutes,
            flagged=record.flagged,
            anomaly=record.anomaly,
            notes=record_notes(record),
        )

    def list_records(
        self,
        hospital_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        tz = now_local().tzinfo
        start_dt = datetime.combine(start, time.min, tzinfo=tz) if start else None
        end_dt = datetime.combine(end, time.max, tzinfo=tz) if end else None
        return self._attendance.list_for_hospital(hospital_id, user_id=user_id, start=start_dt, end=end_dt)

    def records_for_weekly_report(self, hospital_id: str, *, now: Optional[datetime] = None) -> Sequence[AttendanceRecord]:
        now = now or now_local()
        since = now - timedelta(days=REPORT_INTERVAL_DAYS)
        return self._attendance.list_for_hospital(hospital_id, start=since)

    def build_report(
        self,
        hospital_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: Optional[str] = None,
    ) -> ReportData:
        records = self.list_records(hospital_id, start=start, end=end, user_id=user_id)

        summary_map: dict[str, dict] = {}
        rows: list[ReportRow] = []
        for r in records:
            rows.append(self.to_row(r))

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "staff_name": r.user_name,
                    "total_shifts": 0,
                    "flagged_shifts": 0,
                    "late_check_ins": 0,
                    "early_leaves": 0,
                    "_minutes": [],
                }
                summary_map[r.user_id] = s
            s["total_shifts"] += 1
            s["flagged_shifts"] += int(r.flagged)
            s["late_check_ins"] += int(self.is_late(r))
            s["early_leaves"] += int(self.is_early_leave(r))
            if r.duration_minutes is not None:
                s["_minutes"].append(r.duration_minutes)

        summary = []
        for s in summary_map.values():
            minutes = s.pop("_minutes")
            s["average_duration"] = round(sum(minutes) / len(minutes)) if minutes else 0
            summary.append(s)

        summary.sort(key=lambda x: x["total_shifts"], reverse=True)
        return ReportData(rows=rows, summary=summary)
