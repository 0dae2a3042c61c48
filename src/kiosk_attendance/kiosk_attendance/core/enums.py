from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles used for authorization."""

    ADMIN = "admin"
    GUARDIAN = "guardian"


class AttendanceStatus(str, Enum):
    """Kiosk action stored on every ledger record."""

    LOGIN = "login"
    LOGOUT = "logout"


class RecordOrigin(str, Enum):
    """Who produced a ledger record."""

    USER_INPUT = "user-input"
    SYSTEM_FIX = "system-fix"


class Relationship(str, Enum):
    MUM = "Mum"
    DAD = "Dad"
    OTHER = "Other"


class ReconciliationOutcome(str, Enum):
    """Per-student result of a reconciliation pass."""

    SYSTEM_LOGOUT_ADDED = "system_logout_added"
    NO_ACTION_NEEDED = "no_action_needed"
    SKIPPED_NO_RECORDS_TODAY = "skipped:no_records_today"
