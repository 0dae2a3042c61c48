from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from ..core.constants import DEFAULT_SCHOOL_NAME
from ..core.enums import AttendanceStatus, RecordOrigin
from ..core.exceptions import NotificationError
from ..students.model import Student
from ..users.model import Guardian
from ..users.repository import UserRepository
from .dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

_STATUS_JA = {
    AttendanceStatus.LOGIN: "ログイン",
    AttendanceStatus.LOGOUT: "ログアウト",
}


@dataclass(frozen=True)
class NotificationSummary:
    skipped: bool
    guardian_count: int = 0
    success_count: int = 0
    fail_count: int = 0


class NotificationService:
    """Tell each assigned guardian about a kiosk login/logout.

    System-fix corrections are never announced.
    """

    def __init__(
        self,
        users: UserRepository,
        dispatcher: NotificationDispatcher,
        *,
        school_name: str = DEFAULT_SCHOOL_NAME,
    ):
        self._users = users
        self._dispatcher = dispatcher
        self._school_name = school_name

    def build_payload(self, *, guardian: Guardian, student: Student, status: AttendanceStatus, timestamp: str) -> dict:
        return {
            "recipient_id": guardian.user_id,
            "recipient_email": guardian.email,
            "guardian_name": guardian.full_name,
            "relationship": guardian.relationship.value,
            "student_name": student.display_name,
            "student_id": student.student_id,
            "status": status.value,
            "status_ja": _STATUS_JA[status],
            "timestamp": timestamp,
            "school_name": self._school_name,
            "triggered_at": datetime.now(timezone.utc).isoformat(),
        }

    def notify_status_change(
        self,
        *,
        student: Student,
        status: AttendanceStatus,
        timestamp: str,
        origin: RecordOrigin = RecordOrigin.USER_INPUT,
    ) -> NotificationSummary:
        if origin == RecordOrigin.SYSTEM_FIX:
            logger.debug("Skipping notification for system fix on %s", student.student_id)
            return NotificationSummary(skipped=True)

        guardians = self._users.list_guardians_for_student(student.student_id)
        if not guardians:
            logger.info("No guardians to notify for student %s", student.student_id)
            return NotificationSummary(skipped=False)

        ok = 0
        failed = 0
        for guardian in guardians:
            payload = self.build_payload(guardian=guardian, student=student, status=status, timestamp=timestamp)
            try:
                self._dispatcher.dispatch(payload)
                ok += 1
            except NotificationError as exc:
                failed += 1
                logger.error("Notification to guardian %s failed: %s", guardian.user_id, exc)
            except Exception:
                failed += 1
                logger.exception("Dispatcher error for guardian %s", guardian.user_id)

        logger.info("Notifications for %s: %d sent, %d failed", student.student_id, ok, failed)
        return NotificationSummary(skipped=False, guardian_count=len(guardians), success_count=ok, fail_count=failed)
