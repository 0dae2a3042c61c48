from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from ..common import datetime_utils
from ..core.enums import AttendanceStatus, RecordOrigin


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one kiosk event in a student's ledger."""

    timestamp: str
    status: AttendanceStatus
    origin: RecordOrigin = RecordOrigin.USER_INPUT

    @property
    def is_system_fix(self) -> bool:
        return self.origin == RecordOrigin.SYSTEM_FIX

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "status": self.status.value, "origin": self.origin.value}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AttendanceRecord":
        """Decode a stored record.

        Older ledgers used ``date``/``type`` keys and a boolean ``systemfix``
        flag; those are read too. A timestamp that cannot be normalized is kept
        verbatim so write-back never loses it.
        """
        if not isinstance(raw, Mapping):
            raise ValueError(f"Attendance record is not an object: {raw!r}")

        stamp = raw.get("timestamp", raw.get("date"))
        if not isinstance(stamp, str):
            raise ValueError(f"Attendance record has no timestamp: {dict(raw)!r}")
        stamp = datetime_utils.normalize(stamp) or stamp

        status = AttendanceStatus(str(raw.get("status", "")).strip().lower())

        origin_value = raw.get("origin", raw.get("type"))
        if raw.get("systemfix") is True:
            origin = RecordOrigin.SYSTEM_FIX
        elif origin_value:
            origin = RecordOrigin(str(origin_value))
        else:
            origin = RecordOrigin.USER_INPUT

        return cls(timestamp=stamp, status=status, origin=origin)


# Append-only, insertion ordered.
Ledger = Tuple[AttendanceRecord, ...]


@dataclass(frozen=True)
class LogoutDecision:
    """Why the reconciliation pass does or does not close a student's day."""

    needs_logout: bool
    reason: str
    last_record: AttendanceRecord | None = None
    today_count: int = 0
    has_system_logout: bool = False


@dataclass(frozen=True)
class UpdateResult:
    success: bool
    timestamp: str
    student_name: str
    action: AttendanceStatus
