from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from .model import AttendancePolicy


class PolicyRepository(Protocol):
    def get_active(self) -> Optional[AttendancePolicy]:
        """Newest row with is_active set, if any."""

        raise NotImplementedError

    def get_by_id(self, policy_id: int) -> Optional[AttendancePolicy]:
        raise NotImplementedError

    def deactivate_active(self) -> int:
        """Flip every active row to inactive; returns the number of rows changed."""

        raise NotImplementedError

    def insert_active(
        self,
        *,
        start_time: time,
        late_time: time,
        end_time: time,
        created_by: Optional[int],
    ) -> int:
        """Insert a new active row. Raises DuplicateError if another row is still active."""

        raise NotImplementedError

    def list_history(self, *, limit: int, offset: int) -> Sequence[AttendancePolicy]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
