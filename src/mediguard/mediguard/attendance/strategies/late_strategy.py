from __future__ import annotations

from datetime import datetime

from ...core.enums import TimeStatus
from .base import AttendanceStrategy, DeadlinePolicy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in after the deadline."""

    def decide_checkin(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        return StatusDecision(
            status=TimeStatus.LATE,
            note=f"after {policy.check_in_hour:02d}:{policy.check_in_minute:02d}",
        )

    def decide_checkout(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        return StatusDecision(status=TimeStatus.ON_TIME)
