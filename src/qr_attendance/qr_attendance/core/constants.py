"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_TIMEZONE = "Africa/Addis_Ababa"

DEFAULT_START_TIME = time(9, 0)
DEFAULT_END_TIME = time(18, 0)
DEFAULT_LATE_GRACE_MINUTES = 15

# Validity window offsets, minutes relative to the scheduled boundary.
DEFAULT_ARRIVAL_OPENS_BEFORE = 30
DEFAULT_ARRIVAL_CLOSES_AFTER = 120
DEFAULT_DEPARTURE_OPENS_BEFORE = 120
DEFAULT_DEPARTURE_CLOSES_AFTER = 120

DEFAULT_VERY_LATE_DEPARTURE_MINUTES = 30
DEFAULT_DELIVERY_MAX_RETRIES = 3
DEFAULT_SCHEDULE_TOLERANCE_MINUTES = 2
DEFAULT_HISTORY_LIMIT = 50

TOKEN_SECRET_BYTES = 32
