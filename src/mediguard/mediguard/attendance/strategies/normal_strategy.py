from __future__ import annotations

from datetime import datetime

from ...core.enums import TimeStatus
from .base import AttendanceStrategy, DeadlinePolicy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in, normal check-out."""

    def decide_checkin(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        return StatusDecision(status=TimeStatus.ON_TIME)

    def decide_checkout(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        return StatusDecision(status=TimeStatus.ON_TIME)
