from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..attendance import ledger
from ..common import datetime_utils
from ..core.constants import DEFAULT_STATISTICS_DAYS_BACK
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, InvalidInputError, NotFoundError
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.repository import UserRepository
from .formatter import HistoryFormatter, HistoryRow


@dataclass(frozen=True)
class StudentHistory:
    student_name: str
    rows: list[HistoryRow]


@dataclass(frozen=True)
class AttendanceStatistics:
    student_name: str
    period_days: int
    attendance_days: int
    total_logins: int
    total_logouts: int
    system_fixes: int
    attendance_rate: float


class HistoryService:
    """Read-only guardian views over a student's ledger."""

    def __init__(
        self,
        students: StudentRepository,
        users: UserRepository,
        *,
        formatter: Optional[HistoryFormatter] = None,
    ):
        self._students = students
        self._users = users
        self._formatter = formatter or HistoryFormatter()

    def assigned_students(self, guardian_id: int) -> list[Student]:
        out = []
        for student_id in self._users.list_assigned_student_ids(int(guardian_id)):
            student = self._students.get_by_id(student_id)
            if student:
                out.append(student)
        return out

    def _authorized_student(self, guardian_id: int, student_id: str) -> Student:
        if not student_id:
            raise InvalidInputError("Student ID is required")
        if str(student_id) not in set(self._users.list_assigned_student_ids(int(guardian_id))):
            raise AuthorizationError("Student is not assigned to this guardian")

        student = self._students.get_by_id(str(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def student_history(self, guardian_id: int, student_id: str, locale: str = "en") -> StudentHistory:
        student = self._authorized_student(guardian_id, student_id)
        return StudentHistory(
            student_name=student.display_name,
            rows=self._formatter.format(student.attendance_history, locale),
        )

    def statistics(
        self,
        guardian_id: int,
        student_id: str,
        *,
        days_back: int = DEFAULT_STATISTICS_DAYS_BACK,
        utc_now: Optional[datetime] = None,
    ) -> AttendanceStatistics:
        if int(days_back) < 0:
            raise InvalidInputError("days_back must not be negative")

        student = self._authorized_student(guardian_id, student_id)
        since = datetime_utils.days_ago_prefix(days_back, utc_now)
        recent = ledger.records_since(student.attendance_history, since)

        logins = sum(1 for r in recent if r.status == AttendanceStatus.LOGIN)
        logouts = sum(1 for r in recent if r.status == AttendanceStatus.LOGOUT)
        fixes = sum(1 for r in recent if r.status == AttendanceStatus.LOGOUT and r.is_system_fix)
        days = len({datetime_utils.date_prefix(r.timestamp) for r in recent})

        return AttendanceStatistics(
            student_name=student.display_name,
            period_days=int(days_back),
            attendance_days=days,
            total_logins=logins,
            total_logouts=logouts,
            system_fixes=fixes,
            attendance_rate=round(days / days_back * 100, 1) if days_back > 0 else 0.0,
        )
