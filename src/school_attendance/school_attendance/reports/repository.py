from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ReportStatus, ReportType
from ..roster.model import RosterScope
from .model import ExceptionReport, NewReport, ReportFilter


class ReportRepository(Protocol):
    def get_by_id(self, report_id: int) -> Optional[ExceptionReport]:
        raise NotImplementedError

    def find(self, *, student_id: int, report_date: date, report_type: ReportType) -> Optional[ExceptionReport]:
        """Any report (any status, corrections included) for the triple."""

        raise NotImplementedError

    def create(self, report: NewReport) -> int:
        """Raises DuplicateError when a non-correction report already holds the triple."""

        raise NotImplementedError

    def decide(
        self,
        *,
        report_id: int,
        status: ReportStatus,
        processed_by: int,
        processed_at: datetime,
        notes: Optional[str] = None,
        processor_response: Optional[str] = None,
    ) -> bool:
        """Move a pending report to a terminal status; False if it was no longer pending."""

        raise NotImplementedError

    def set_response(self, *, report_id: int, processor_response: Optional[str]) -> bool:
        raise NotImplementedError

    def list(self, criteria: ReportFilter, *, limit: int) -> Sequence[ExceptionReport]:
        raise NotImplementedError

    def list_approved_for_date(
        self,
        report_date: date,
        scope: Optional[RosterScope] = None,
    ) -> Sequence[ExceptionReport]:
        raise NotImplementedError
