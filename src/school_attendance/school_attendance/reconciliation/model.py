from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus
from ..roster.model import Student


@dataclass(frozen=True)
class UnresolvedEntry:
    """A student whose day still needs staff attention.

    status is `absent` (no record, no approved report) or `late` (late record,
    no approved late report). record is None for absent entries.
    """

    student: Student
    status: AttendanceStatus
    record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class DayEntry:
    student: Student
    status: AttendanceStatus
    record: Optional[AttendanceRecord] = None

    @property
    def has_record(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class DayView:
    attendance_date: date
    entries: Sequence[DayEntry]
    summary: Dict[AttendanceStatus, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.entries)
