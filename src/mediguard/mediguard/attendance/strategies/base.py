from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.constants import CHECK_IN_DEADLINE_HOUR, CHECK_IN_DEADLINE_MINUTE, CHECK_OUT_DEADLINE_HOUR
from ...core.enums import TimeStatus


@dataclass(frozen=True)
class DeadlinePolicy:
    """Punctuality deadlines, applied to local wall-clock time when a record is read."""

    check_in_hour: int = CHECK_IN_DEADLINE_HOUR
    check_in_minute: int = CHECK_IN_DEADLINE_MINUTE
    check_out_hour: int = CHECK_OUT_DEADLINE_HOUR


@dataclass(frozen=True)
class StatusDecision:
    status: TimeStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in/check-out time is labelled."""

    @abstractmethod
    def decide_checkin(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, at: datetime, policy: DeadlinePolicy) -> StatusDecision:
        raise NotImplementedError
