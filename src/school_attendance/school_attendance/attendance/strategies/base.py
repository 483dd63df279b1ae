from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...policies.model import AttendancePolicy


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a check-in status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        raise NotImplementedError
