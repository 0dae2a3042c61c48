"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

JST_OFFSET_HOURS = 9

SYSTEM_LOGOUT_HOUR = 22
SYSTEM_LOGOUT_MINUTE = 0
SYSTEM_LOGOUT_SECOND = 0

# 22:30 JST
DEFAULT_RECONCILE_HOUR_UTC = 13
DEFAULT_RECONCILE_MINUTE_UTC = 30

MAX_CHILD_ID_LENGTH = 8
DEFAULT_MAX_WRITE_ATTEMPTS = 3

DEFAULT_STATS_DAYS = 7
DEFAULT_STATISTICS_DAYS_BACK = 30
RECENT_FIXES_LIMIT = 20

MISSING_TIME_PLACEHOLDER = "—"
SYSTEM_FIX_MARKER = "#"

DEFAULT_SCHOOL_NAME = "ELife International School"
