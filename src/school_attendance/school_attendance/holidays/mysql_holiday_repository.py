from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import HolidayKind, HolidaySource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_duplicate
from .model import Holiday
from .repository import HolidayRepository

_SELECT = """
    SELECT holiday_id, holiday_date, name, kind, source, is_active, created_by, created_at
    FROM holidays
"""


def _to_holiday(r: dict) -> Holiday:
    return Holiday(
        holiday_id=int(r["holiday_id"]),
        holiday_date=r["holiday_date"],
        name=r["name"],
        kind=HolidayKind(r["kind"]),
        source=HolidaySource(r["source"]),
        is_active=bool(r["is_active"]),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_date(self, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE holiday_date=%s AND is_active=1", (holiday_date,))
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE holiday_id=%s", (int(holiday_id),))
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE holiday_date=%s", (holiday_date,))
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def create(
        self,
        *,
        holiday_date: date,
        name: str,
        kind: HolidayKind,
        source: HolidaySource,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            with translate_duplicate(f"A holiday is already registered on {holiday_date:%Y-%m-%d}"):
                cur.execute(
                    """
                    INSERT INTO holidays(holiday_date, name, kind, source, is_active, created_by)
                    VALUES(%s,%s,%s,%s,1,%s)
                    """,
                    (holiday_date, name, kind.value, source.value, created_by),
                )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        holiday_id: int,
        name: Optional[str] = None,
        kind: Optional[HolidayKind] = None,
        is_active: Optional[bool] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        if name is not None:
            sets.append("name=%s")
            params.append(name)
        if kind is not None:
            sets.append("kind=%s")
            params.append(kind.value)
        if is_active is not None:
            sets.append("is_active=%s")
            params.append(1 if is_active else 0)
        if not sets:
            return False

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE holidays SET {', '.join(sets)} WHERE holiday_id=%s",
                tuple(params + [int(holiday_id)]),
            )
            return cur.rowcount > 0

    def delete(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            return cur.rowcount > 0

    def list_range(
        self,
        *,
        start: date,
        end: date,
        kind: Optional[HolidayKind] = None,
        is_active: Optional[bool] = True,
    ) -> Sequence[Holiday]:
        clauses = ["holiday_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if kind is not None:
            clauses.append("kind=%s")
            params.append(kind.value)
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(1 if is_active else 0)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY holiday_date ASC", tuple(params))
            return [_to_holiday(r) for r in fetchall(cur)]
