from __future__ import annotations

import logging
from datetime import time
from typing import Optional

from ..common.datetime_utils import format_time, parse_time_of_day
from ..core.constants import DEFAULT_END_TIME, DEFAULT_HISTORY_LIMIT, DEFAULT_LATE_TIME, DEFAULT_START_TIME
from ..core.exceptions import DuplicateError, ValidationError
from ..database.transaction import TransactionManager
from .model import AttendancePolicy, PolicyHistoryPage, PolicyWindow
from .repository import PolicyRepository

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = PolicyWindow(DEFAULT_START_TIME, DEFAULT_LATE_TIME, DEFAULT_END_TIME)


def normalize_window(window: PolicyWindow) -> tuple[time, time, time]:
    """Parse the three times and enforce start < late < end."""

    start = parse_time_of_day(window.start_time)
    late = parse_time_of_day(window.late_time)
    end = parse_time_of_day(window.end_time)

    if start >= late:
        raise ValidationError("Late threshold must be later than the start time")
    if late >= end:
        raise ValidationError("End time must be later than the late threshold")
    return start, late, end


class PolicyService:
    """Versioned attendance time window with exactly one active row.

    The active policy is always read from storage; nothing is cached in process.
    """

    def __init__(self, policies: PolicyRepository, tx: TransactionManager):
        self._policies = policies
        self._tx = tx

    def get_active_policy(self) -> AttendancePolicy:
        policy = self._policies.get_active()
        if policy is not None:
            return policy

        try:
            with self._tx.atomic():
                policy_id = self._policies.insert_active(
                    start_time=DEFAULT_START_TIME,
                    late_time=DEFAULT_LATE_TIME,
                    end_time=DEFAULT_END_TIME,
                    created_by=None,
                )
            logger.info("No active attendance policy, stored defaults as policy %s", policy_id)
        except DuplicateError:
            # A concurrent first read stored the default already.
            pass

        policy = self._policies.get_active()
        if policy is None:
            raise RuntimeError("Active attendance policy missing after initialisation")
        return policy

    def set_policy(self, window: PolicyWindow, *, created_by: Optional[int]) -> AttendancePolicy:
        start, late, end = normalize_window(window)

        with self._tx.atomic():
            self._policies.deactivate_active()
            policy_id = self._policies.insert_active(
                start_time=start,
                late_time=late,
                end_time=end,
                created_by=created_by,
            )

        logger.info(
            "Attendance policy %s activated by %s: start=%s late=%s end=%s",
            policy_id,
            created_by,
            format_time(start),
            format_time(late),
            format_time(end),
        )
        policy = self._policies.get_by_id(policy_id)
        if policy is None:
            raise RuntimeError(f"Attendance policy {policy_id} missing after insert")
        return policy

    def reset_policy(self, *, created_by: Optional[int]) -> AttendancePolicy:
        return self.set_policy(DEFAULT_WINDOW, created_by=created_by)

    def list_history(self, *, page: int = 1, limit: int = DEFAULT_HISTORY_LIMIT) -> PolicyHistoryPage:
        page = max(int(page), 1)
        limit = max(min(int(limit), 100), 1)
        items = self._policies.list_history(limit=limit, offset=(page - 1) * limit)
        return PolicyHistoryPage(items=items, page=page, limit=limit, total=self._policies.count())
