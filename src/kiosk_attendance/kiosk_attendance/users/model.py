from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Relationship, Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account that can sign in (admin or guardian).

    Note: Plain data object, no DB access here.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Guardian:
    """A guardian as seen from one student: who to notify and how they relate."""

    user_id: int
    full_name: str
    email: Optional[str]
    relationship: Relationship = Relationship.OTHER
