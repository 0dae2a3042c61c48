import json

import pytest

from src.kiosk_attendance.kiosk_attendance.attendance import ledger
from src.kiosk_attendance.kiosk_attendance.attendance.inference import (
    REASON_ALREADY_CLOSED,
    REASON_LAST_RECORD_IS_LOGIN,
    REASON_NO_RECORDS_TODAY,
    is_logged_in,
    needs_automatic_logout,
    next_action,
)
from src.kiosk_attendance.kiosk_attendance.core.enums import AttendanceStatus, RecordOrigin


def test_records_on_day_filters_and_sorts(make_record):
    history = (
        make_record("2024-05-01 17:00:00", "logout"),
        make_record("2024-04-30 08:00:00", "login"),
        make_record("2024-05-01 08:00:00", "login"),
    )

    today = ledger.records_on_day(history, "2024-05-01")

    assert [r.timestamp for r in today] == ["2024-05-01 08:00:00", "2024-05-01 17:00:00"]


def test_last_record_is_insertion_order_last(make_record):
    history = (
        make_record("2024-05-01 17:00:00", "logout"),
        make_record("2024-05-01 08:00:00", "login"),
    )

    assert ledger.last_record(history).timestamp == "2024-05-01 08:00:00"
    assert ledger.last_record(()) is None


def test_append_returns_new_ledger(make_record):
    original = (make_record("2024-05-01 08:00:00", "login"),)
    extra = make_record("2024-05-01 17:00:00", "logout")

    updated = ledger.append(original, extra)

    assert len(original) == 1
    assert updated == original + (extra,)


def test_next_action_scenario_a(make_record):
    history = ()
    assert next_action(history) == AttendanceStatus.LOGIN

    history = ledger.append(history, make_record("2024-05-01 08:00:00", "login"))
    assert next_action(history) == AttendanceStatus.LOGOUT
    assert is_logged_in(history)


def test_next_action_only_looks_at_last_appended_record(make_record):
    # Chronologically the logout is last, but the login was appended last.
    history = (
        make_record("2024-05-01 10:00:00", "logout"),
        make_record("2024-05-01 09:00:00", "login"),
    )
    assert next_action(history) == AttendanceStatus.LOGOUT

    history = (
        make_record("2024-05-01 08:00:00", "login"),
        make_record("2024-05-01 09:00:00", "logout"),
        make_record("2024-05-01 10:00:00", "login"),
        make_record("2024-05-01 11:00:00", "logout"),
    )
    assert next_action(history) == AttendanceStatus.LOGIN


def test_no_records_today(make_record):
    assert needs_automatic_logout((), "2024-05-01").reason == REASON_NO_RECORDS_TODAY

    yesterday_only = (make_record("2024-04-30 08:00:00", "login"),)
    decision = needs_automatic_logout(yesterday_only, "2024-05-01")
    assert decision.needs_logout is False
    assert decision.reason == REASON_NO_RECORDS_TODAY


def test_open_login_needs_logout_scenario_b(make_record):
    decision = needs_automatic_logout((make_record("2024-05-01 08:00:00", "login"),), "2024-05-01")

    assert decision.needs_logout is True
    assert decision.reason == REASON_LAST_RECORD_IS_LOGIN
    assert decision.today_count == 1


def test_second_login_after_logout_needs_logout_scenario_c(make_record):
    history = (
        make_record("2024-05-01 08:00:00", "login"),
        make_record("2024-05-01 17:00:00", "logout"),
        make_record("2024-05-01 18:00:00", "login"),
    )
    decision = needs_automatic_logout(history, "2024-05-01")

    assert decision.needs_logout is True
    assert decision.last_record.timestamp == "2024-05-01 18:00:00"


def test_existing_system_logout_blocks_scenario_d(make_record):
    history = (
        make_record("2024-05-01 08:00:00", "login"),
        make_record("2024-05-01 22:00:00", "logout", "system-fix"),
    )
    decision = needs_automatic_logout(history, "2024-05-01")

    assert decision.needs_logout is False
    assert decision.has_system_logout is True
    assert decision.reason == REASON_ALREADY_CLOSED


def test_system_logout_blocks_even_if_a_later_login_follows(make_record):
    history = (
        make_record("2024-05-01 08:00:00", "login"),
        make_record("2024-05-01 22:00:00", "logout", "system-fix"),
        make_record("2024-05-01 22:15:00", "login"),
    )
    assert needs_automatic_logout(history, "2024-05-01").needs_logout is False


def test_uses_chronological_order_not_insertion_order(make_record):
    # Appended out of order; by time the day ends with the 18:00 login.
    history = (
        make_record("2024-05-01 18:00:00", "login"),
        make_record("2024-05-01 17:00:00", "logout"),
        make_record("2024-05-01 08:00:00", "login"),
    )
    assert needs_automatic_logout(history, "2024-05-01").needs_logout is True

    # Appended last is a login, but by time the day ends with a logout.
    history = (
        make_record("2024-05-01 17:00:00", "logout"),
        make_record("2024-05-01 08:00:00", "login"),
    )
    assert next_action(history) == AttendanceStatus.LOGOUT
    assert needs_automatic_logout(history, "2024-05-01").needs_logout is False


def test_decode_reads_legacy_field_names():
    raw = json.dumps(
        [
            {"date": "2024-05-01T08:00:00", "status": "login", "type": "user-input"},
            {"date": "2024-05-01 22:00:00 JST", "status": "logout", "systemfix": True},
            {"timestamp": "2024-05-02 08:00:00", "status": "login"},
        ]
    )

    history = ledger.decode(raw)

    assert [r.timestamp for r in history] == [
        "2024-05-01 08:00:00",
        "2024-05-01 22:00:00",
        "2024-05-02 08:00:00",
    ]
    assert history[1].origin == RecordOrigin.SYSTEM_FIX
    assert history[2].origin == RecordOrigin.USER_INPUT


def test_encode_writes_canonical_field_names(make_record):
    encoded = json.loads(ledger.encode((make_record("2024-05-01 22:00:00", "logout", "system-fix"),)))

    assert encoded == [{"timestamp": "2024-05-01 22:00:00", "status": "logout", "origin": "system-fix"}]


def test_unparseable_timestamp_is_kept_but_ignored_for_analysis():
    history = ledger.decode([{"date": "sometime", "status": "login"}])

    assert history[0].timestamp == "sometime"
    assert ledger.sorted_records(history) == []
    assert needs_automatic_logout(history, "2024-05-01").reason == REASON_NO_RECORDS_TODAY


def test_malformed_same_day_stamp_does_not_close_the_day():
    history = ledger.decode(
        [
            {"timestamp": "2024-05-01 9:00:00", "status": "logout"},
            {"timestamp": "2024-05-01 18:00:00", "status": "login"},
        ]
    )

    assert history[0].timestamp == "2024-05-01 9:00:00"
    assert [r.timestamp for r in ledger.records_on_day(history, "2024-05-01")] == ["2024-05-01 18:00:00"]
    decision = needs_automatic_logout(history, "2024-05-01")
    assert decision.needs_logout is True
    assert decision.today_count == 1


@pytest.mark.parametrize("item", [None, "login", 42, ["2024-05-01 08:00:00", "login"]])
def test_decode_rejects_items_that_are_not_objects(item):
    with pytest.raises(ValueError):
        ledger.decode(json.dumps([item]))
