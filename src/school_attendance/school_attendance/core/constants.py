"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_START_TIME = time(7, 0, 0)
DEFAULT_LATE_TIME = time(8, 0, 0)
DEFAULT_END_TIME = time(9, 0, 0)

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_RECORDS_DAYS = 30
DEFAULT_LIST_LIMIT = 500

WEEKEND_NAMES = {5: "Saturday", 6: "Sunday"}
