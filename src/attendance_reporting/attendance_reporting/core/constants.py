"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_SIZE = 30
RECENT_FETCH_LIMIT = 100
FALLBACK_FETCH_LIMIT = 500

AUTO_REFRESH_SECONDS = 30
NOTICE_DISPLAY_SECONDS = 5

MAX_SHIFT_HOURS = 24
OVERTIME_THRESHOLD_HOURS = 8

TIME_SENTINEL = "N/A"
UNKNOWN_EMPLOYEE = "Unknown"
UNKNOWN_DEPARTMENT = "Unknown"

ANALYTICS_DEFAULT_DAYS = 30
TOP_PERFORMER_LIMIT = 10

CSV_ENCODING = "utf-8-sig"

# Epoch numbers above this are milliseconds, below it seconds.
EPOCH_MILLIS_THRESHOLD = 100_000_000_000
