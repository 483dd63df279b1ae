from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ReportStatus, ReportType


@dataclass(frozen=True)
class ExceptionReport:
    """A student request or staff declaration explaining one day's attendance.

    is_correction marks the audit entries written by administrator
    corrections; those are exempt from (student, date, type) uniqueness.
    """

    report_id: int
    student_id: int
    report_date: date
    report_type: ReportType
    reason: str
    status: ReportStatus
    submitted_at: datetime
    processed_at: Optional[datetime] = None
    processed_by: Optional[int] = None
    admin_created: bool = False
    is_correction: bool = False
    attachments: Optional[Sequence[str]] = None
    notes: Optional[str] = None
    processor_response: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != ReportStatus.PENDING


@dataclass(frozen=True)
class NewReport:
    student_id: int
    report_date: date
    report_type: ReportType
    reason: str
    status: ReportStatus = ReportStatus.PENDING
    admin_created: bool = False
    is_correction: bool = False
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None
    attachments: Optional[Sequence[str]] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ReportFilter:
    report_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    report_type: Optional[ReportType] = None
    status: Optional[ReportStatus] = None
    grade: Optional[int] = None
    class_no: Optional[int] = None
    student_id: Optional[int] = None
