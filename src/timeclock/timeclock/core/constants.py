"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE = 1
DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100

DEFAULT_TIMEZONE = "UTC"
DEFAULT_CONCURRENCY_MAX_RETRIES = 3

HOURS_DECIMAL_PLACES = 2
STORED_HOURS_DECIMAL_PLACES = 6
