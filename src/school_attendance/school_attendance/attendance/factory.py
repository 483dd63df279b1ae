from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..policies.model import AttendancePolicy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the classification strategy for a check-in.

    Only the late threshold matters: strictly before it is on time, anything
    from it onwards (past the window end too) is late.
    """

    def for_checkin(self, *, now: datetime, policy: AttendancePolicy) -> AttendanceStrategy:
        if now.time() < policy.late_time:
            return OnTimeStrategy()
        return LateStrategy()
