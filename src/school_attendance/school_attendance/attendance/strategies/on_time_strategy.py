from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...policies.model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Check-in before the late threshold."""

    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)
