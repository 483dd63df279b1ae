from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the single outcome of one student's school day."""

    attendance_id: int
    student_id: int
    attendance_date: date
    check_in_time: Optional[time]
    status: AttendanceStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CheckInResult:
    status: AttendanceStatus
    record: AttendanceRecord
