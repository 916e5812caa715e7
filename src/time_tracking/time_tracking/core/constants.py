"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "America/Santiago"

STANDARD_DAY_MINUTES = 8 * 60
MAX_LUNCH_MINUTES = 120
MAX_DAILY_WORK_MINUTES = 10 * 60

DEFAULT_RECENT_ACTIVITY_LIMIT = 5
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Monday=0 ... Friday=4
WORKING_WEEKDAYS = (0, 1, 2, 3, 4)
