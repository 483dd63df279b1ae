from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import HolidayKind, HolidaySource


@dataclass(frozen=True)
class Holiday:
    holiday_id: Optional[int]
    holiday_date: date
    name: str
    kind: HolidayKind
    source: HolidaySource
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_computed(self) -> bool:
        """True for weekend entries synthesized from the calendar (never stored)."""

        return self.holiday_id is None


@dataclass(frozen=True)
class HolidayCheck:
    """Answer of the holiday gate for one date."""

    date: date
    holiday: bool
    name: Optional[str] = None
    kind: Optional[HolidayKind] = None
    source: Optional[HolidaySource] = None
