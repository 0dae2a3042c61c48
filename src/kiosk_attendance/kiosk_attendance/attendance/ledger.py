"""Pure functions over an attendance ledger.

A ledger is never mutated in place: ``append`` returns a new tuple so a reader
holding the old value is unaffected by a concurrent write.
"""
from __future__ import annotations

import json
from typing import Iterable, Optional

from ..common import datetime_utils
from .model import AttendanceRecord, Ledger


def sorted_records(ledger: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    """Canonical records in chronological order (stable for equal stamps)."""
    return sorted((r for r in ledger if datetime_utils.is_valid(r.timestamp)), key=lambda r: r.timestamp)


def records_on_day(ledger: Iterable[AttendanceRecord], day_prefix: str) -> list[AttendanceRecord]:
    return [r for r in sorted_records(ledger) if datetime_utils.date_prefix(r.timestamp) == day_prefix]


def records_since(ledger: Iterable[AttendanceRecord], day_prefix: str) -> list[AttendanceRecord]:
    """Records whose civil day is ``day_prefix`` or later."""
    return [r for r in sorted_records(ledger) if datetime_utils.date_prefix(r.timestamp) >= day_prefix]


def last_record(ledger: Ledger) -> Optional[AttendanceRecord]:
    """Most recently appended record; insertion order, not timestamp order."""
    return ledger[-1] if ledger else None


def append(ledger: Ledger, record: AttendanceRecord) -> Ledger:
    return tuple(ledger) + (record,)


def encode(ledger: Iterable[AttendanceRecord]) -> str:
    return json.dumps([r.to_dict() for r in ledger], ensure_ascii=False)


def decode(raw: object) -> Ledger:
    """Decode the stored JSON array (or an already-parsed list)."""
    if raw is None or raw == "":
        return ()
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    items = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(items, list):
        raise ValueError("attendance_history must be a JSON array")
    return tuple(AttendanceRecord.from_dict(item) for item in items)
