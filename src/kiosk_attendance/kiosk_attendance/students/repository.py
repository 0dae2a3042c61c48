from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Record store for Student aggregates.

    There is no partial update: ``save`` always writes the whole aggregate, and
    only if the stored version still equals ``expected_version``.
    """

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def find_by_child_id(self, child_id: str) -> Sequence[Student]:
        raise NotImplementedError

    def list_ids(self) -> Sequence[str]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def save(self, student: Student, *, expected_version: int) -> bool:
        """Return False when another writer got there first."""

        raise NotImplementedError
