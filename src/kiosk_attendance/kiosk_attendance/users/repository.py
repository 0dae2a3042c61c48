from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Guardian, User


class UserRepository(Protocol):
    """Repository interface for accounts and guardian links.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_assigned_student_ids(self, user_id: int) -> Sequence[str]:
        raise NotImplementedError

    def list_guardians_for_student(self, student_id: str) -> Sequence[Guardian]:
        raise NotImplementedError
