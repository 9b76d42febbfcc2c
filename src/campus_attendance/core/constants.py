"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MS_PER_MINUTE = 60_000

DEFAULT_TOKEN_MAX_AGE_SECONDS = 10 * 60
DEFAULT_TOKEN_MAX_FUTURE_SECONDS = 5 * 60
DEFAULT_TIMEZONE = "UTC"

MIN_SESSION_MINUTES = 15
MAX_SESSION_MINUTES = 8 * 60
MAX_SCHEDULE_AHEAD_DAYS = 366
MAX_NAME_LENGTH = 100

DEFAULT_HISTORY_LIMIT = 30
