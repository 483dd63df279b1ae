from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import iter_days, month_bounds
from ..common.validators import require_choice, require_non_empty
from ..core.constants import WEEKEND_NAMES
from ..core.enums import HolidayKind, HolidaySource
from ..core.exceptions import DuplicateError, NotFoundError, ValidationError
from .model import Holiday, HolidayCheck
from .repository import HolidayRepository

logger = logging.getLogger(__name__)

# Administrators register these by hand; weekend rows come from the calendar.
MANUAL_KINDS = frozenset({HolidayKind.NATIONAL, HolidayKind.SCHOOL})


def computed_weekend(day: date) -> Optional[Holiday]:
    name = WEEKEND_NAMES.get(day.weekday())
    if name is None:
        return None
    return Holiday(
        holiday_id=None,
        holiday_date=day,
        name=name,
        kind=HolidayKind.WEEKEND,
        source=HolidaySource.SYSTEM,
    )


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def is_holiday(self, day: date) -> HolidayCheck:
        """Holiday gate: stored active row first, then the computed weekend.

        Pure read, safe on the check-in path.
        """

        holiday = self._holidays.get_active_for_date(day) or computed_weekend(day)
        if holiday is None:
            return HolidayCheck(date=day, holiday=False)
        return HolidayCheck(
            date=day,
            holiday=True,
            name=holiday.name,
            kind=holiday.kind,
            source=holiday.source,
        )

    def create(self, *, holiday_date: date, name: str, kind, created_by: Optional[int]) -> Holiday:
        name = require_non_empty(name, "Holiday name")
        kind = require_choice(kind, HolidayKind, "holiday kind")
        if kind not in MANUAL_KINDS:
            raise ValidationError("Holiday kind must be national or school")

        existing = self._holidays.get_by_date(holiday_date)
        if existing is not None:
            raise DuplicateError(f"A holiday is already registered on {holiday_date:%Y-%m-%d} ({existing.name})")

        holiday_id = self._holidays.create(
            holiday_date=holiday_date,
            name=name,
            kind=kind,
            source=HolidaySource.MANUAL,
            created_by=created_by,
        )
        logger.info("Holiday %s registered on %s by %s", holiday_id, holiday_date, created_by)
        return self._require(holiday_id)

    def update(
        self,
        *,
        holiday_id: int,
        name: Optional[str] = None,
        kind=None,
        is_active: Optional[bool] = None,
    ) -> Holiday:
        self._require(holiday_id)

        if name is not None:
            name = require_non_empty(name, "Holiday name")
        if kind is not None:
            kind = require_choice(kind, HolidayKind, "holiday kind")
            if kind not in MANUAL_KINDS:
                raise ValidationError("Holiday kind must be national or school")
        if name is None and kind is None and is_active is None:
            raise ValidationError("Nothing to update")

        self._holidays.update(holiday_id=int(holiday_id), name=name, kind=kind, is_active=is_active)
        return self._require(holiday_id)

    def delete(self, holiday_id: int) -> Holiday:
        holiday = self._require(holiday_id)
        if not self._holidays.delete(int(holiday_id)):
            raise NotFoundError("Holiday not found")
        logger.info("Holiday %s on %s deleted", holiday_id, holiday.holiday_date)
        return holiday

    def list_holidays(
        self,
        *,
        year: int,
        month: Optional[int] = None,
        kind=None,
        is_active: Optional[bool] = True,
    ) -> Sequence[Holiday]:
        kind = require_choice(kind, HolidayKind, "holiday kind") if kind else None
        if month is not None:
            start, end = month_bounds(year, month)
        else:
            start, end = date(int(year), 1, 1), date(int(year), 12, 31)

        items = list(self._holidays.list_range(start=start, end=end, kind=kind, is_active=is_active))

        # Weekends are only expanded for a single month, like the admin calendar view.
        if month is not None and kind in (None, HolidayKind.WEEKEND) and is_active is not False:
            stored_dates = {h.holiday_date for h in self._holidays.list_range(start=start, end=end, is_active=None)}
            for day in iter_days(start, end):
                weekend = computed_weekend(day)
                if weekend is not None and day not in stored_dates:
                    items.append(weekend)

        items.sort(key=lambda h: h.holiday_date)
        return items

    def materialize_weekends(self, *, year: int, month: int, created_by: Optional[int]) -> int:
        """Store weekend rows for a month, skipping dates that already have a row."""

        start, end = month_bounds(year, month)
        created = 0
        for day in iter_days(start, end):
            weekend = computed_weekend(day)
            if weekend is None or self._holidays.get_by_date(day) is not None:
                continue
            try:
                self._holidays.create(
                    holiday_date=day,
                    name=weekend.name,
                    kind=HolidayKind.WEEKEND,
                    source=HolidaySource.SYSTEM,
                    created_by=created_by,
                )
                created += 1
            except DuplicateError:
                continue

        logger.info("Materialized %s weekend rows for %04d-%02d", created, int(year), int(month))
        return created

    def _require(self, holiday_id: int) -> Holiday:
        holiday = self._holidays.get_by_id(int(holiday_id))
        if holiday is None:
            raise NotFoundError("Holiday not found")
        return holiday
