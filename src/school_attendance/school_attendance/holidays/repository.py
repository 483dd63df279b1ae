from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import HolidayKind, HolidaySource
from .model import Holiday


class HolidayRepository(Protocol):
    def get_active_for_date(self, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError

    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        raise NotImplementedError

    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        """Stored row for the date whatever its active flag."""

        raise NotImplementedError

    def create(
        self,
        *,
        holiday_date: date,
        name: str,
        kind: HolidayKind,
        source: HolidaySource,
        created_by: Optional[int],
    ) -> int:
        """Raises DuplicateError when the date is already stored."""

        raise NotImplementedError

    def update(
        self,
        *,
        holiday_id: int,
        name: Optional[str] = None,
        kind: Optional[HolidayKind] = None,
        is_active: Optional[bool] = None,
    ) -> bool:
        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        kind: Optional[HolidayKind] = None,
        is_active: Optional[bool] = True,
    ) -> Sequence[Holiday]:
        raise NotImplementedError
