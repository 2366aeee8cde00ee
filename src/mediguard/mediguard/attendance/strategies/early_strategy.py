from __future__ import annotations

from datetime import datetime

from ...core.enums import TimeStatus
from .base import AttendanceStrategy, DeadlinePolicy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Check-out before the end-of-day deadline."""

    def decide_checkin(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        return StatusDecision(status=TimeStatus.ON_TIME)

    def decide_checkout(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        return StatusDecision(status=TimeStatus.EARLY, note=f"before {policy.check_out_hour:02d}:00")
