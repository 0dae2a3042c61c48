"""Turns a raw ledger into the guardian-facing history table.

Rows are grouped by civil day, newest day first. Inside a day each login is
paired with the next unpaired logout that follows it; whichever side is
missing is shown as ``—``. A logout added by the nightly reconciliation shows
``#`` instead of a time.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..attendance.ledger import sorted_records
from ..attendance.model import AttendanceRecord
from ..common import datetime_utils
from ..core.constants import MISSING_TIME_PLACEHOLDER, SYSTEM_FIX_MARKER
from ..core.enums import AttendanceStatus

_WEEKDAYS_EN = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_WEEKDAYS_JA = ("月", "火", "水", "木", "金", "土", "日")


@dataclass(frozen=True)
class HistoryRow:
    date: str
    login: str
    logout: str

    def to_dict(self) -> dict:
        return {"date": self.date, "login": self.login, "logout": self.logout}


@dataclass(frozen=True)
class DayGroup:
    date: str
    login_times: tuple[str, ...]
    logout_times: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"date": self.date, "login_times": list(self.login_times), "logout_times": list(self.logout_times)}


def is_japanese(locale: str | None) -> bool:
    return (locale or "").lower().replace("_", "-").split("-")[0] == "ja"


def date_label(day_prefix: str, locale: str | None = "en") -> str:
    """``2024/05/01, Wednesday`` or ``2024/05/01 水``."""
    day = datetime_utils.parse(f"{day_prefix} 00:00:00")
    slashed = day.strftime("%Y/%m/%d")
    if is_japanese(locale):
        return f"{slashed} {_WEEKDAYS_JA[day.weekday()]}"
    return f"{slashed}, {_WEEKDAYS_EN[day.weekday()]}"


def time_text(record: AttendanceRecord) -> str:
    if record.status == AttendanceStatus.LOGOUT and record.is_system_fix:
        return SYSTEM_FIX_MARKER
    return record.timestamp[11:16]


def _by_day(ledger: Iterable[AttendanceRecord]) -> dict[str, list[AttendanceRecord]]:
    days: dict[str, list[AttendanceRecord]] = {}
    for r in sorted_records(ledger):
        days.setdefault(datetime_utils.date_prefix(r.timestamp), []).append(r)
    return days


class HistoryFormatter:
    def format(self, ledger: Iterable[AttendanceRecord], locale: str | None = "en") -> list[HistoryRow]:
        days = _by_day(ledger)
        rows: list[HistoryRow] = []
        for day in sorted(days, reverse=True):
            rows.extend(self._pair_day(days[day], date_label(day, locale)))
        return rows

    @staticmethod
    def _pair_day(records: list[AttendanceRecord], label: str) -> list[HistoryRow]:
        used = [False] * len(records)
        rows: list[HistoryRow] = []

        for i, r in enumerate(records):
            if used[i]:
                continue
            used[i] = True

            if r.status == AttendanceStatus.LOGOUT:
                rows.append(HistoryRow(date=label, login=MISSING_TIME_PLACEHOLDER, logout=time_text(r)))
                continue

            logout = MISSING_TIME_PLACEHOLDER
            for j in range(i + 1, len(records)):
                if not used[j] and records[j].status == AttendanceStatus.LOGOUT:
                    used[j] = True
                    logout = time_text(records[j])
                    break
            rows.append(HistoryRow(date=label, login=time_text(r), logout=logout))

        return rows

    def group_by_day(self, ledger: Iterable[AttendanceRecord], locale: str | None = "en") -> list[DayGroup]:
        days = _by_day(ledger)
        return [
            DayGroup(
                date=date_label(day, locale),
                login_times=tuple(time_text(r) for r in days[day] if r.status == AttendanceStatus.LOGIN),
                logout_times=tuple(time_text(r) for r in days[day] if r.status == AttendanceStatus.LOGOUT),
            )
            for day in sorted(days, reverse=True)
        ]
