from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .strategies.base import AttendanceStrategy, DeadlinePolicy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    Times are compared as local wall-clock hour/minute; seconds are ignored.
    """

    def for_checkin(self, *, at: datetime, policy: DeadlinePolicy) -> AttendanceStrategy:
        local = at.astimezone() if at.tzinfo else at
        if (local.hour, local.minute) > (policy.check_in_hour, policy.check_in_minute):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, at: datetime, policy: DeadlinePolicy) -> AttendanceStrategy:
        local = at.astimezone() if at.tzinfo else at
        if local.hour < policy.check_out_hour:
            return EarlyLeaveStrategy()
        return NormalStrategy()
