from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional, Sequence


@dataclass(frozen=True)
class AttendancePolicy:
    """One row of the append-only policy log.

    Superseded rows are never edited; only the is_active flag of the current
    row is flipped when a newer policy is stored.
    """

    policy_id: int
    start_time: time
    late_time: time
    end_time: time
    is_active: bool
    created_at: datetime
    created_by: Optional[int] = None


@dataclass(frozen=True)
class PolicyWindow:
    """Requested window; values may be HH:MM / HH:MM:SS strings or times."""

    start_time: object
    late_time: object
    end_time: object


@dataclass(frozen=True)
class PolicyHistoryPage:
    items: Sequence[AttendancePolicy]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
