from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from ..attendance.model import Ledger


@dataclass(frozen=True)
class Student:
    """Domain entity: Student aggregate.

    Everything except ``attendance_history`` is owned elsewhere and must be
    written back exactly as it was read. ``version`` is the optimistic
    concurrency token bumped by every successful write.
    """

    student_id: str
    child_id: str
    name: str
    email: Optional[str] = None
    profile: Mapping[str, Any] = field(default_factory=dict)
    attendance_history: Ledger = ()
    version: int = 0

    @property
    def display_name(self) -> str:
        name = (self.name or "").strip()
        return name or "Student"

    def with_history(self, history: Ledger) -> "Student":
        return replace(self, attendance_history=tuple(history))
