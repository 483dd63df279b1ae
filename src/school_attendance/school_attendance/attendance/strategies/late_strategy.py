from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...policies.model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in at or after the late threshold, including after the window end."""

    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        note = None
        if now.time() > policy.end_time:
            note = f"after window end {policy.end_time:%H:%M:%S}"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)
