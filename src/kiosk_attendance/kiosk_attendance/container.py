from __future__ import annotations

from dataclasses import dataclass

from .attendance.service import AttendanceService
from .core.constants import DEFAULT_MAX_WRITE_ATTEMPTS, DEFAULT_SCHOOL_NAME, SYSTEM_LOGOUT_HOUR
from .database.connection import DBConfig, DatabaseConnection
from .history.service import HistoryService
from .kiosk.service import KioskService
from .notifications.dispatcher import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    SmtpNotificationDispatcher,
    SmtpSettings,
)
from .notifications.service import NotificationService
from .reconciliation.service import ReconciliationService
from .students.mysql_student_repository import MySQLStudentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    students_repo: MySQLStudentRepository
    users_repo: MySQLUserRepository

    auth_service: AuthService
    notification_service: NotificationService
    attendance_service: AttendanceService
    kiosk_service: KioskService
    reconciliation_service: ReconciliationService
    history_service: HistoryService


def build_dispatcher(settings: dict) -> NotificationDispatcher:
    if str(settings.get("NOTIFIER", "log")).lower() == "smtp":
        return SmtpNotificationDispatcher(
            SmtpSettings(
                host=str(settings["SMTP_HOST"]),
                port=int(settings.get("SMTP_PORT", 587)),
                username=str(settings.get("SMTP_USERNAME", "")),
                password=str(settings.get("SMTP_PASSWORD", "")),
                sender=str(settings.get("SMTP_SENDER", "noreply@example.com")),
                use_tls=bool(settings.get("SMTP_USE_TLS", True)),
            )
        )
    return LoggingNotificationDispatcher()


def build_container(*, db_config: dict, settings: dict | None = None) -> Container:
    settings = settings or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    max_attempts = int(settings.get("MAX_WRITE_ATTEMPTS", DEFAULT_MAX_WRITE_ATTEMPTS))

    students_repo = MySQLStudentRepository(conn)
    users_repo = MySQLUserRepository(conn)

    auth_service = AuthService(users_repo)
    notification_service = NotificationService(
        users_repo,
        build_dispatcher(settings),
        school_name=str(settings.get("SCHOOL_NAME", DEFAULT_SCHOOL_NAME)),
    )
    attendance_service = AttendanceService(students_repo, notification_service, max_write_attempts=max_attempts)
    kiosk_service = KioskService(attendance_service)
    reconciliation_service = ReconciliationService(
        students_repo,
        logout_hour=int(settings.get("SYSTEM_LOGOUT_HOUR", SYSTEM_LOGOUT_HOUR)),
        max_write_attempts=max_attempts,
    )
    history_service = HistoryService(students_repo, users_repo)

    return Container(
        conn=conn,
        students_repo=students_repo,
        users_repo=users_repo,
        auth_service=auth_service,
        notification_service=notification_service,
        attendance_service=attendance_service,
        kiosk_service=kiosk_service,
        reconciliation_service=reconciliation_service,
        history_service=history_service,
    )
