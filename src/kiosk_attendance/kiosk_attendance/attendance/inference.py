"""Attendance state inference.

Two questions are answered here and they deliberately look at the ledger
differently:

* ``next_action`` drives the kiosk prompt and only looks at the record that
  was appended last, whatever its timestamp.
* ``needs_automatic_logout`` drives the nightly reconciliation and looks at the
  day's records sorted by timestamp.
"""
from __future__ import annotations

from ..core.enums import AttendanceStatus
from .ledger import last_record, records_on_day
from .model import LogoutDecision, Ledger

REASON_NO_RECORDS_TODAY = "no_records_today"
REASON_LAST_RECORD_IS_LOGIN = "last_record_is_login"
REASON_ALREADY_CLOSED = "already_logged_out_or_has_system_fix"


def next_action(ledger: Ledger) -> AttendanceStatus:
    last = last_record(ledger)
    if last is not None and last.status == AttendanceStatus.LOGIN:
        return AttendanceStatus.LOGOUT
    return AttendanceStatus.LOGIN


def is_logged_in(ledger: Ledger) -> bool:
    return next_action(ledger) == AttendanceStatus.LOGOUT


def needs_automatic_logout(ledger: Ledger, day_prefix: str) -> LogoutDecision:
    today = records_on_day(ledger, day_prefix)
    if not today:
        return LogoutDecision(needs_logout=False, reason=REASON_NO_RECORDS_TODAY)

    last = today[-1]
    is_last_login = last.status == AttendanceStatus.LOGIN

    has_system_logout = any(r.status == AttendanceStatus.LOGOUT and r.is_system_fix for r in today)

    last_login_index = -1
    for i, r in enumerate(today):
        if r.status == AttendanceStatus.LOGIN:
            last_login_index = i
    has_logout_after_last_login = any(r.status == AttendanceStatus.LOGOUT for r in today[last_login_index + 1 :])

    needs = is_last_login and not has_system_logout and not has_logout_after_last_login
    return LogoutDecision(
        needs_logout=needs,
        reason=REASON_LAST_RECORD_IS_LOGIN if needs else REASON_ALREADY_CLOSED,
        last_record=last,
        today_count=len(today),
        has_system_logout=has_system_logout,
    )
