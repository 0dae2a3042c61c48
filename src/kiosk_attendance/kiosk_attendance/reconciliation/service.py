"""Nightly reconciliation of forgotten logouts.

Once a day, after the 22:00 JST cutoff, every student whose day ends with an
open login gets a ``system-fix`` logout stamped at 22:00. The decision comes
from ``needs_automatic_logout``, so running the pass again on the same day
changes nothing.

The pass is best-effort per student: a broken ledger or a failed write is
recorded in the report and the remaining students are still processed. Only a
failure to enumerate students aborts the run.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..attendance import ledger
from ..attendance.inference import REASON_NO_RECORDS_TODAY, needs_automatic_logout
from ..attendance.model import AttendanceRecord
from ..common import datetime_utils
from ..core.constants import (
    DEFAULT_MAX_WRITE_ATTEMPTS,
    DEFAULT_STATS_DAYS,
    RECENT_FIXES_LIMIT,
    SYSTEM_LOGOUT_HOUR,
    SYSTEM_LOGOUT_MINUTE,
    SYSTEM_LOGOUT_SECOND,
)
from ..core.enums import AttendanceStatus, ReconciliationOutcome, RecordOrigin
from ..core.exceptions import ConcurrencyConflictError, DomainError, InvalidInputError, NotFoundError
from ..students.repository import StudentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentOutcome:
    student_id: str
    name: str
    child_id: str
    action: ReconciliationOutcome
    reason: Optional[str] = None
    timestamp: Optional[str] = None
    records_before: Optional[int] = None
    records_after: Optional[int] = None


@dataclass(frozen=True)
class StudentFailure:
    student_id: str
    error: str


@dataclass(frozen=True)
class ReconciliationReport:
    success: bool
    processed_students: int
    system_logouts_added: int
    check_date: str
    trigger_type: str
    outcomes: list[StudentOutcome] = field(default_factory=list)
    errors: list[StudentFailure] = field(default_factory=list)
    started_at: str = ""
    finished_at_jst: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["outcomes"] = [dict(o, action=o["action"].value) for o in data["outcomes"]]
        return data


@dataclass(frozen=True)
class SystemFixEntry:
    student_name: str
    child_id: str
    timestamp: str
    status: str
    origin: str


@dataclass(frozen=True)
class SystemCheckStats:
    total_system_fixes: int
    students_with_fixes: int
    total_students: int
    check_period_days: int
    since: str
    recent_fixes: list[SystemFixEntry]
    daily_breakdown: dict[str, dict]
    fix_rate: str
    avg_fixes_per_student: str
    generated_at_jst: str

    def to_dict(self) -> dict:
        return asdict(self)


class ReconciliationService:
    def __init__(
        self,
        students: StudentRepository,
        *,
        logout_hour: int = SYSTEM_LOGOUT_HOUR,
        logout_minute: int = SYSTEM_LOGOUT_MINUTE,
        max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS,
    ):
        self._students = students
        self._logout_hour = int(logout_hour)
        self._logout_minute = int(logout_minute)
        self._max_write_attempts = max(1, int(max_write_attempts))

    def _logout_stamp(self, check_date: str, utc_now: Optional[datetime]) -> str:
        stamp = datetime_utils.format(self._logout_hour, self._logout_minute, SYSTEM_LOGOUT_SECOND, utc_now=utc_now)
        if datetime_utils.date_prefix(stamp) != check_date:
            # Re-running an earlier day: keep the cutoff time on that day.
            stamp = f"{check_date}{stamp[10:]}"
        return stamp

    def run(
        self,
        day_prefix: Optional[str] = None,
        *,
        utc_now: Optional[datetime] = None,
        trigger_type: str = "scheduled",
    ) -> ReconciliationReport:
        started_at = (utc_now or datetime.now(timezone.utc)).isoformat()
        check_date = day_prefix or datetime_utils.today_prefix(utc_now)
        if not datetime_utils.is_valid(f"{check_date} 00:00:00"):
            raise InvalidInputError(f"Invalid check date: {check_date!r}")

        logger.info("Missing-logout check for %s (%s)", check_date, trigger_type)

        # Enumeration failure is the only thing that aborts the run.
        student_ids = list(self._students.list_ids())
        logger.info("Found %d students", len(student_ids))

        outcomes: list[StudentOutcome] = []
        errors: list[StudentFailure] = []
        added = 0

        for student_id in student_ids:
            try:
                outcome = self._reconcile_student(student_id, check_date, utc_now)
            except (DomainError, ValueError, KeyError, TypeError) as exc:
                logger.error("Error processing student %s: %s", student_id, exc)
                errors.append(StudentFailure(student_id=student_id, error=str(exc)))
                continue

            outcomes.append(outcome)
            if outcome.action == ReconciliationOutcome.SYSTEM_LOGOUT_ADDED:
                added += 1

        logger.info(
            "Missing-logout check done for %s: processed=%d added=%d errors=%d",
            check_date,
            len(student_ids),
            added,
            len(errors),
        )
        for failure in errors:
            logger.warning("  %s: %s", failure.student_id, failure.error)

        return ReconciliationReport(
            success=True,
            processed_students=len(student_ids),
            system_logouts_added=added,
            check_date=check_date,
            trigger_type=trigger_type,
            outcomes=outcomes,
            errors=errors,
            started_at=started_at,
            finished_at_jst=datetime_utils.now(utc_now),
        )

    def run_manual(self, day_prefix: Optional[str] = None, *, utc_now: Optional[datetime] = None) -> ReconciliationReport:
        logger.info("Manual reconciliation triggered")
        return self.run(day_prefix, utc_now=utc_now, trigger_type="manual")

    def _reconcile_student(self, student_id: str, check_date: str, utc_now: Optional[datetime]) -> StudentOutcome:
        for attempt in range(1, self._max_write_attempts + 1):
            student = self._students.get_by_id(student_id)
            if student is None:
                raise NotFoundError(f"Student {student_id} disappeared during the run")

            decision = needs_automatic_logout(student.attendance_history, check_date)
            if not decision.needs_logout:
                action = (
                    ReconciliationOutcome.SKIPPED_NO_RECORDS_TODAY
                    if decision.reason == REASON_NO_RECORDS_TODAY
                    else ReconciliationOutcome.NO_ACTION_NEEDED
                )
                return StudentOutcome(
                    student_id=student.student_id,
                    name=student.display_name,
                    child_id=student.child_id,
                    action=action,
                    reason=decision.reason,
                )

            record = AttendanceRecord(
                timestamp=self._logout_stamp(check_date, utc_now),
                status=AttendanceStatus.LOGOUT,
                origin=RecordOrigin.SYSTEM_FIX,
            )
            updated = student.with_history(ledger.append(student.attendance_history, record))
            if self._students.save(updated, expected_version=student.version):
                logger.info("System logout added for %s at %s", student.display_name, record.timestamp)
                return StudentOutcome(
                    student_id=student.student_id,
                    name=student.display_name,
                    child_id=student.child_id,
                    action=ReconciliationOutcome.SYSTEM_LOGOUT_ADDED,
                    reason=decision.reason,
                    timestamp=record.timestamp,
                    records_before=len(student.attendance_history),
                    records_after=len(updated.attendance_history),
                )
            logger.warning("Write conflict for student %s (attempt %d), re-reading", student_id, attempt)

        raise ConcurrencyConflictError(f"Student {student_id} kept changing during reconciliation")

    def system_check_stats(self, days: int = DEFAULT_STATS_DAYS, *, utc_now: Optional[datetime] = None) -> SystemCheckStats:
        since = datetime_utils.days_ago_prefix(days, utc_now)
        students = list(self._students.list_all())

        total = 0
        affected = 0
        recent: list[SystemFixEntry] = []
        daily: dict[str, dict] = defaultdict(lambda: {"count": 0, "students": []})

        for student in students:
            fixes = [r for r in ledger.records_since(student.attendance_history, since) if r.is_system_fix]
            if not fixes:
                continue
            affected += 1
            total += len(fixes)
            for fix in fixes:
                day = datetime_utils.date_prefix(fix.timestamp)
                daily[day]["count"] += 1
                daily[day]["students"].append(student.display_name)
                recent.append(
                    SystemFixEntry(
                        student_name=student.display_name,
                        child_id=student.child_id,
                        timestamp=fix.timestamp,
                        status=fix.status.value,
                        origin=fix.origin.value,
                    )
                )

        recent.sort(key=lambda e: e.timestamp, reverse=True)
        fix_rate = f"{affected / len(students) * 100:.2f}%" if students else "0%"
        avg = f"{total / affected:.2f}" if affected else "0"

        return SystemCheckStats(
            total_system_fixes=total,
            students_with_fixes=affected,
            total_students=len(students),
            check_period_days=int(days),
            since=since,
            recent_fixes=recent[:RECENT_FIXES_LIMIT],
            daily_breakdown=dict(daily),
            fix_rate=fix_rate,
            avg_fixes_per_student=avg,
            generated_at_jst=datetime_utils.now(utc_now),
        )
