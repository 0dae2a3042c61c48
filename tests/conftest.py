from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import pytest

from src.kiosk_attendance.kiosk_attendance.attendance.model import AttendanceRecord
from src.kiosk_attendance.kiosk_attendance.core.enums import AttendanceStatus, RecordOrigin, Relationship
from src.kiosk_attendance.kiosk_attendance.core.exceptions import NotificationError, PersistenceError
from src.kiosk_attendance.kiosk_attendance.students.model import Student
from src.kiosk_attendance.kiosk_attendance.users.model import Guardian


class InMemoryStudents:
    """Versioned full-aggregate store, like the MySQL repository."""

    def __init__(self):
        self._by_id: dict[str, Student] = {}
        self.saves: list[Student] = []
        self.fail_on_save: set[str] = set()
        self.fail_on_get: set[str] = set()
        self.unreachable = False
        # student_id -> records another kiosk sneaks in before our next write
        self.interleaved: dict[str, list[AttendanceRecord]] = {}

    def add(self, student: Student) -> Student:
        self._by_id[student.student_id] = student
        return student

    def get_by_id(self, student_id: str) -> Optional[Student]:
        if student_id in self.fail_on_get:
            raise ValueError(f"malformed ledger for {student_id}")
        return self._by_id.get(student_id)

    def find_by_child_id(self, child_id: str):
        return [s for s in self._by_id.values() if s.child_id == child_id]

    def list_ids(self):
        if self.unreachable:
            raise PersistenceError("Record store unreachable")
        return list(self._by_id)

    def list_all(self):
        return list(self._by_id.values())

    def save(self, student: Student, *, expected_version: int) -> bool:
        if student.student_id in self.fail_on_save:
            raise PersistenceError("write failed")

        pending = self.interleaved.pop(student.student_id, None)
        if pending:
            current = self._by_id[student.student_id]
            self._by_id[student.student_id] = replace(
                current,
                attendance_history=current.attendance_history + tuple(pending),
                version=current.version + 1,
            )

        if self._by_id[student.student_id].version != expected_version:
            return False
        stored = replace(student, version=expected_version + 1)
        self._by_id[student.student_id] = stored
        self.saves.append(stored)
        return True


class InMemoryUsers:
    def __init__(self):
        self.assigned: dict[int, list[str]] = {}
        self.guardians: dict[str, list[Guardian]] = {}

    def get_by_id(self, user_id):
        return None

    def get_by_username(self, username):
        return None

    def list_assigned_student_ids(self, user_id: int):
        return list(self.assigned.get(int(user_id), []))

    def list_guardians_for_student(self, student_id: str):
        return list(self.guardians.get(student_id, []))


class RecordingDispatcher:
    def __init__(self):
        self.payloads: list[dict] = []
        self.fail_for: set[int] = set()

    def dispatch(self, payload: dict) -> None:
        if payload["recipient_id"] in self.fail_for:
            raise NotificationError("mail server down")
        self.payloads.append(payload)


def rec(timestamp: str, status: str, origin: str = "user-input") -> AttendanceRecord:
    return AttendanceRecord(timestamp=timestamp, status=AttendanceStatus(status), origin=RecordOrigin(origin))


@pytest.fixture
def fixed_now() -> datetime:
    # 2024-05-01 22:30:00 JST
    return datetime(2024, 5, 1, 13, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def make_record():
    return rec


@pytest.fixture
def make_student():
    def _make(student_id="s-1", child_id="1001", name="Yamada Taro", history=(), **kwargs) -> Student:
        kwargs.setdefault("email", "taro@example.com")
        kwargs.setdefault("profile", {"grade": "3", "class": "B"})
        return Student(student_id=student_id, child_id=child_id, name=name, attendance_history=tuple(history), **kwargs)

    return _make


@pytest.fixture
def guardian():
    return Guardian(user_id=7, full_name="Yamada Hanako", email="hanako@example.com", relationship=Relationship.MUM)
