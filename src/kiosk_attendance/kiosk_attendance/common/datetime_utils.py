"""Canonical attendance timestamps.

Every ledger timestamp is a ``YYYY-MM-DD HH:MM:SS`` string in Japan Standard
Time. The string is built from calendar fields of ``UTC + 9h`` so the result
does not depend on the timezone or locale of the process running it. Because
the format is fixed width and date-major, comparing two timestamps as plain
strings gives their chronological order.

Functions that read the clock accept an optional ``utc_now`` so tests can pin
the instant.
"""
from __future__ import annotations

import logging
import re
import time as _time
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..core.constants import JST_OFFSET_HOURS
from ..core.exceptions import InvalidInputError, TimestampFormatError

logger = logging.getLogger(__name__)

JST_OFFSET = timedelta(hours=JST_OFFSET_HOURS)
CANONICAL_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

# Spellings written by earlier revisions of the kiosk.
_LEGACY_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ](\d{2}:\d{2}:\d{2})(?:\.\d+)?(?: ?JST)?$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _jst_civil(utc_now: Optional[datetime]) -> datetime:
    """Naive datetime holding the JST wall-clock fields for ``utc_now``."""
    instant = utc_now or _utc_now()
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant + JST_OFFSET


def _fields(year: int, month: int, day: int, hour: int, minute: int, second: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d} {hour:02d}:{minute:02d}:{second:02d}"


def _fallback_civil() -> _time.struct_time:
    # Offset-based reconstruction straight from the epoch clock.
    return _time.gmtime(_time.time() + JST_OFFSET_HOURS * 3600)


def _checked(value: str) -> str:
    if not isinstance(value, str) or not is_valid(value):
        raise TimestampFormatError(f"Generated timestamp is not canonical: {value!r}")
    return value


def is_valid(value: object) -> bool:
    return isinstance(value, str) and CANONICAL_PATTERN.match(value) is not None


def date_prefix(value: str) -> str:
    """``YYYY-MM-DD`` part of a timestamp, used to bucket records by civil day."""
    return value[:10]


def now(utc_now: Optional[datetime] = None) -> str:
    """Current instant as a canonical JST timestamp."""
    try:
        civil = _jst_civil(utc_now)
        return _checked(_fields(civil.year, civil.month, civil.day, civil.hour, civil.minute, civil.second))
    except (TimestampFormatError, OverflowError, ValueError, TypeError, AttributeError, OSError) as exc:
        logger.warning("JST timestamp construction failed, using fallback clock: %s", exc)
        t = _fallback_civil()
        return _fields(t.tm_year, t.tm_mon, t.tm_mday, t.tm_hour, t.tm_min, t.tm_sec)


def format(hour: int, minute: int = 0, second: int = 0, *, utc_now: Optional[datetime] = None) -> str:  # noqa: A001
    """Today's JST date combined with a fixed time of day."""
    if not (0 <= int(hour) <= 23 and 0 <= int(minute) <= 59 and 0 <= int(second) <= 59):
        raise InvalidInputError(f"Invalid time of day {hour}:{minute}:{second}")

    try:
        civil = _jst_civil(utc_now)
        return _checked(_fields(civil.year, civil.month, civil.day, int(hour), int(minute), int(second)))
    except (TimestampFormatError, OverflowError, ValueError, TypeError, AttributeError, OSError) as exc:
        logger.warning("JST timestamp construction failed, using fallback clock: %s", exc)
        t = _fallback_civil()
        return _fields(t.tm_year, t.tm_mon, t.tm_mday, int(hour), int(minute), int(second))


def today_prefix(utc_now: Optional[datetime] = None) -> str:
    return date_prefix(now(utc_now))


def days_ago_prefix(days: int, utc_now: Optional[datetime] = None) -> str:
    """Day prefix ``days`` calendar days before today (JST)."""
    today = parse(now(utc_now))
    return (today - timedelta(days=int(days))).strftime("%Y-%m-%d")


def normalize(value: object) -> Optional[str]:
    """Return the canonical form of a stored timestamp, or ``None`` if unusable.

    Accepts the canonical form plus the ``YYYY-MM-DDTHH:MM:SS`` and
    ``... JST`` spellings found in older ledgers.
    """
    if not isinstance(value, str):
        return None
    value = value.strip()
    if is_valid(value):
        return value
    m = _LEGACY_PATTERN.match(value)
    if not m:
        return None
    candidate = f"{m.group(1)} {m.group(2)}"
    try:
        parse(candidate)
    except ValueError:
        return None
    return candidate


def parse(value: str) -> datetime:
    """Canonical timestamp -> naive datetime in JST civil time."""
    return datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
