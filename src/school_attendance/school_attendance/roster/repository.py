from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import RosterScope, Student


class RosterRepository(Protocol):
    """Read-only view of the roster collaborator.

    Note (DIP): services depend on this interface, never on the roster tables directly.
    """

    def get_student(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_students(self, scope: Optional[RosterScope] = None) -> Sequence[Student]:
        """Students under scope, ordered by grade, class, number."""

        raise NotImplementedError
