from __future__ import annotations

import json
from typing import Any, Dict, Optional, Sequence

from ..attendance import ledger
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, child_id, name, email, profile, attendance_history, version"


def _load_profile(raw: Any) -> dict:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    value = json.loads(raw) if isinstance(raw, str) else raw
    return dict(value or {})


def _to_student(r: Dict[str, Any]) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        child_id=str(r["child_id"]),
        name=r.get("name") or "",
        email=r.get("email"),
        profile=_load_profile(r.get("profile")),
        attendance_history=ledger.decode(r.get("attendance_history")),
        version=int(r.get("version") or 0),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (str(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def find_by_child_id(self, child_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE child_id=%s", (str(child_id),))
            return [_to_student(r) for r in fetchall(cur)]

    def list_ids(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_id FROM students ORDER BY child_id ASC")
            return [str(r["student_id"]) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY child_id ASC")
            return [_to_student(r) for r in fetchall(cur)]

    def save(self, student: Student, *, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET child_id=%s, name=%s, email=%s, profile=%s, attendance_history=%s, version=version+1
                WHERE student_id=%s AND version=%s
                """,
                (
                    student.child_id,
                    student.name,
                    student.email,
                    json.dumps(dict(student.profile), ensure_ascii=False),
                    ledger.encode(student.attendance_history),
                    student.student_id,
                    int(expected_version),
                ),
            )
            return cur.rowcount > 0
