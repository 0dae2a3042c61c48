from datetime import datetime, timedelta, timezone

import pytest

from src.kiosk_attendance.kiosk_attendance.common import datetime_utils
from src.kiosk_attendance.kiosk_attendance.core.exceptions import InvalidInputError


def test_now_is_jst_civil_time(fixed_now):
    assert datetime_utils.now(fixed_now) == "2024-05-01 22:30:00"


def test_now_rolls_over_to_next_jst_day():
    utc = datetime(2024, 5, 1, 15, 30, 5, tzinfo=timezone.utc)
    assert datetime_utils.now(utc) == "2024-05-02 00:30:05"


def test_now_ignores_the_input_timezone():
    tokyo = timezone(timedelta(hours=9))
    new_york = timezone(timedelta(hours=-4))
    a = datetime(2024, 5, 1, 22, 30, tzinfo=tokyo)
    b = datetime(2024, 5, 1, 9, 30, tzinfo=new_york)
    assert datetime_utils.now(a) == datetime_utils.now(b) == "2024-05-01 22:30:00"


def test_naive_instant_is_treated_as_utc():
    assert datetime_utils.now(datetime(2024, 5, 1, 0, 0, 0)) == "2024-05-01 09:00:00"


def test_format_uses_today_with_fixed_time(fixed_now):
    assert datetime_utils.format(22, 0, 0, utc_now=fixed_now) == "2024-05-01 22:00:00"


def test_format_rejects_out_of_range_time():
    with pytest.raises(InvalidInputError):
        datetime_utils.format(24, 0, 0)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-05-01 08:00:00", True),
        ("2024-05-01T08:00:00", False),
        ("2024-5-1 08:00:00", False),
        ("2024-05-01 08:00", False),
        (None, False),
        (datetime(2024, 5, 1), False),
    ],
)
def test_is_valid(value, expected):
    assert datetime_utils.is_valid(value) is expected


def test_date_prefix():
    assert datetime_utils.date_prefix("2024-05-01 08:00:00") == "2024-05-01"


def test_string_order_matches_chronological_order():
    base = datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    instants = [base + timedelta(seconds=s) for s in (0, 1, 59, 3600, 86400 * 40, 86400 * 400)]
    stamps = [datetime_utils.now(i) for i in instants]
    assert all(datetime_utils.is_valid(s) for s in stamps)
    assert sorted(stamps) == stamps
    assert sorted(reversed(stamps)) == stamps


def test_clock_failure_falls_back_to_epoch_reconstruction(monkeypatch):
    def broken(_):
        raise OverflowError("clock exploded")

    monkeypatch.setattr(datetime_utils, "_jst_civil", broken)

    assert datetime_utils.is_valid(datetime_utils.now())
    stamp = datetime_utils.format(22, 0, 0)
    assert datetime_utils.is_valid(stamp)
    assert stamp.endswith(" 22:00:00")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2024-05-01 08:00:00", "2024-05-01 08:00:00"),
        ("2024-05-01T08:00:00", "2024-05-01 08:00:00"),
        ("2024-05-01T08:00:00.123", "2024-05-01 08:00:00"),
        ("2024-05-01 08:00:00 JST", "2024-05-01 08:00:00"),
        ("2024-13-01T08:00:00", None),
        ("yesterday", None),
        (None, None),
    ],
)
def test_normalize_legacy_spellings(raw, expected):
    assert datetime_utils.normalize(raw) == expected


def test_days_ago_prefix(fixed_now):
    assert datetime_utils.days_ago_prefix(7, fixed_now) == "2024-04-24"
    assert datetime_utils.today_prefix(fixed_now) == "2024-05-01"
