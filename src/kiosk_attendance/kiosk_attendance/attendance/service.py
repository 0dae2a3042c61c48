from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common import datetime_utils
from ..common.validators import require_child_id, require_status
from ..core.constants import DEFAULT_MAX_WRITE_ATTEMPTS
from ..core.enums import AttendanceStatus, RecordOrigin
from ..core.exceptions import ConcurrencyConflictError, NotFoundError, NotificationError, PersistenceError
from ..notifications.service import NotificationService
from ..students.model import Student
from ..students.repository import StudentRepository
from . import ledger
from .inference import next_action
from .model import AttendanceRecord, UpdateResult

logger = logging.getLogger(__name__)


class AttendanceService:
    """Records kiosk logins/logouts.

    The student aggregate is read, one record is appended to its ledger and the
    whole aggregate is written back conditionally on its version. A lost race
    re-reads and re-appends, up to ``max_write_attempts`` times.
    """

    def __init__(
        self,
        students: StudentRepository,
        notifications: NotificationService | None = None,
        *,
        max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS,
    ):
        self._students = students
        self._notifications = notifications
        self._max_write_attempts = max(1, int(max_write_attempts))

    def resolve(self, student_ref: str) -> Student:
        child_id = require_child_id(student_ref)
        matches = list(self._students.find_by_child_id(child_id))
        if not matches:
            raise NotFoundError(f"No student with ID {child_id}")
        if len(matches) > 1:
            logger.error("Student ID %s is shared by %d students", child_id, len(matches))
            raise NotFoundError(f"Student ID {child_id} is ambiguous")
        return matches[0]

    def next_action_for(self, student_ref: str) -> tuple[Student, AttendanceStatus]:
        student = self.resolve(student_ref)
        return student, next_action(student.attendance_history)

    def update(self, student_ref: str, status, *, utc_now: Optional[datetime] = None) -> UpdateResult:
        status = require_status(status)
        child_id = require_child_id(student_ref)

        for attempt in range(1, self._max_write_attempts + 1):
            student = self.resolve(child_id)
            record = AttendanceRecord(
                timestamp=datetime_utils.now(utc_now),
                status=status,
                origin=RecordOrigin.USER_INPUT,
            )
            updated = student.with_history(ledger.append(student.attendance_history, record))
            if self._students.save(updated, expected_version=student.version):
                break
            logger.warning("Write conflict for student %s (attempt %d)", student.student_id, attempt)
        else:
            raise ConcurrencyConflictError(f"Could not record {status.value} for student {child_id}, please retry")

        logger.info("Recorded %s for %s at %s", status.value, student.student_id, record.timestamp)

        if self._notifications:
            try:
                self._notifications.notify_status_change(
                    student=updated,
                    status=status,
                    timestamp=record.timestamp,
                    origin=record.origin,
                )
            except (NotificationError, PersistenceError) as exc:
                # Attendance is already stored.
                logger.error("Guardian notification failed for %s: %s", student.student_id, exc)

        return UpdateResult(success=True, timestamp=record.timestamp, student_name=student.display_name, action=status)
