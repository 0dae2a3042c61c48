from src.kiosk_attendance.kiosk_attendance.core.enums import AttendanceStatus, RecordOrigin, Relationship
from src.kiosk_attendance.kiosk_attendance.notifications.service import NotificationService
from src.kiosk_attendance.kiosk_attendance.users.model import Guardian


def _service(users_repo, dispatcher):
    return NotificationService(users_repo, dispatcher, school_name="Sakura Elementary")


def test_payload_fields(users_repo, dispatcher, make_student, guardian):
    users_repo.guardians["s-1"] = [guardian]

    summary = _service(users_repo, dispatcher).notify_status_change(
        student=make_student(), status=AttendanceStatus.LOGOUT, timestamp="2024-05-01 17:00:00"
    )

    assert summary.guardian_count == 1
    assert summary.success_count == 1
    payload = dispatcher.payloads[0]
    assert payload["recipient_email"] == "hanako@example.com"
    assert payload["relationship"] == "Mum"
    assert payload["student_name"] == "Yamada Taro"
    assert payload["status_ja"] == "ログアウト"
    assert payload["school_name"] == "Sakura Elementary"


def test_system_fix_is_not_announced(users_repo, dispatcher, make_student, guardian):
    users_repo.guardians["s-1"] = [guardian]

    summary = _service(users_repo, dispatcher).notify_status_change(
        student=make_student(),
        status=AttendanceStatus.LOGOUT,
        timestamp="2024-05-01 22:00:00",
        origin=RecordOrigin.SYSTEM_FIX,
    )

    assert summary.skipped is True
    assert dispatcher.payloads == []


def test_one_failed_guardian_does_not_block_the_others(users_repo, dispatcher, make_student, guardian):
    dad = Guardian(user_id=8, full_name="Yamada Ichiro", email="ichiro@example.com", relationship=Relationship.DAD)
    users_repo.guardians["s-1"] = [guardian, dad]
    dispatcher.fail_for.add(guardian.user_id)

    summary = _service(users_repo, dispatcher).notify_status_change(
        student=make_student(), status=AttendanceStatus.LOGIN, timestamp="2024-05-01 08:00:00"
    )

    assert summary.success_count == 1
    assert summary.fail_count == 1
    assert [p["recipient_id"] for p in dispatcher.payloads] == [8]


def test_no_guardians(users_repo, dispatcher, make_student):
    summary = _service(users_repo, dispatcher).notify_status_change(
        student=make_student(), status=AttendanceStatus.LOGIN, timestamp="2024-05-01 08:00:00"
    )

    assert summary.guardian_count == 0
    assert dispatcher.payloads == []


class BrokenDispatcher:
    def __init__(self):
        self.calls = 0

    def dispatch(self, payload):
        self.calls += 1
        if payload["recipient_id"] == 7:
            raise RuntimeError("webhook down")


def test_unexpected_dispatcher_error_is_counted_as_failure(users_repo, make_student, guardian):
    dad = Guardian(user_id=8, full_name="Yamada Ichiro", email="ichiro@example.com", relationship=Relationship.DAD)
    users_repo.guardians["s-1"] = [guardian, dad]
    broken = BrokenDispatcher()

    summary = NotificationService(users_repo, broken).notify_status_change(
        student=make_student(), status=AttendanceStatus.LOGIN, timestamp="2024-05-01 08:00:00"
    )

    assert broken.calls == 2
    assert summary.fail_count == 1
    assert summary.success_count == 1
