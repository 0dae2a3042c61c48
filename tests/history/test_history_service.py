from datetime import datetime, timezone

import pytest

from src.kiosk_attendance.kiosk_attendance.core.exceptions import AuthorizationError, InvalidInputError, NotFoundError
from src.kiosk_attendance.kiosk_attendance.history.service import HistoryService


@pytest.fixture
def service(students_repo, users_repo):
    return HistoryService(students_repo, users_repo)


def test_assigned_students(service, students_repo, users_repo, make_student):
    students_repo.add(make_student("s-1", "1001"))
    students_repo.add(make_student("s-2", "1002", name="Yamada Jiro"))
    users_repo.assigned[7] = ["s-2", "gone"]

    assert [s.student_id for s in service.assigned_students(7)] == ["s-2"]


def test_history_for_assigned_student(service, students_repo, users_repo, make_student, make_record):
    students_repo.add(make_student(history=[make_record("2024-05-01 08:00:00", "login")]))
    users_repo.assigned[7] = ["s-1"]

    history = service.student_history(7, "s-1", "ja")

    assert history.student_name == "Yamada Taro"
    assert history.rows[0].date == "2024/05/01 水"
    assert history.rows[0].logout == "—"


def test_history_requires_assignment(service, students_repo, users_repo, make_student):
    students_repo.add(make_student())
    users_repo.assigned[7] = []

    with pytest.raises(AuthorizationError):
        service.student_history(7, "s-1")
    with pytest.raises(InvalidInputError):
        service.student_history(7, "")


def test_history_for_missing_student(service, users_repo):
    users_repo.assigned[7] = ["s-9"]

    with pytest.raises(NotFoundError):
        service.student_history(7, "s-9")


def test_statistics(service, students_repo, users_repo, make_student, make_record):
    students_repo.add(
        make_student(
            history=[
                make_record("2024-03-01 08:00:00", "login"),
                make_record("2024-04-29 08:00:00", "login"),
                make_record("2024-04-29 22:00:00", "logout", "system-fix"),
                make_record("2024-04-30 08:00:00", "login"),
                make_record("2024-04-30 16:00:00", "logout"),
            ]
        )
    )
    users_repo.assigned[7] = ["s-1"]

    stats = service.statistics(7, "s-1", days_back=10, utc_now=datetime(2024, 5, 1, 3, 0, tzinfo=timezone.utc))

    assert stats.attendance_days == 2
    assert stats.total_logins == 2
    assert stats.total_logouts == 2
    assert stats.system_fixes == 1
    assert stats.attendance_rate == 20.0


def test_statistics_rejects_negative_window(service):
    with pytest.raises(InvalidInputError):
        service.statistics(7, "s-1", days_back=-1)
