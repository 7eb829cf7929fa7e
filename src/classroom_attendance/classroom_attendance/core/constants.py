"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_BEFORE_MINUTES = 5
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_TOKEN_ROTATION_SECONDS = 20
DEFAULT_LOCATION_TIMEOUT_SECONDS = 10
DEFAULT_LOCATION_MAX_AGE_SECONDS = 60
DEFAULT_TIMEZONE = "UTC"
DEFAULT_AT_RISK_THRESHOLD = 3
DEFAULT_TREND_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30

EARTH_RADIUS_METERS = 6_371_000
TOKEN_BYTES = 24
UNKNOWN_DEPARTMENT = "Unknown"
