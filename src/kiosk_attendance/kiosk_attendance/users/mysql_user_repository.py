from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Relationship, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Guardian, User
from .repository import UserRepository


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        email=row.get("email"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, username, password_hash, role, email, is_active
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, username, password_hash, role, email, is_active
                FROM users
                WHERE username=%s
                """,
                (username,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_assigned_student_ids(self, user_id: int) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id FROM guardian_students WHERE user_id=%s ORDER BY student_id",
                (int(user_id),),
            )
            return [str(r["student_id"]) for r in fetchall(cur)]

    def list_guardians_for_student(self, student_id: str) -> Sequence[Guardian]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.full_name, u.email, gs.relationship
                FROM guardian_students gs
                JOIN users u ON u.user_id = gs.user_id
                WHERE gs.student_id=%s AND u.is_active=1 AND u.role=%s
                ORDER BY u.user_id
                """,
                (str(student_id), Role.GUARDIAN.value),
            )
            return [
                Guardian(
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    email=r.get("email"),
                    relationship=Relationship(r.get("relationship") or Relationship.OTHER.value),
                )
                for r in fetchall(cur)
            ]
