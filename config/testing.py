import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Fixed policy so tests do not depend on the environment
CHECKIN_GRACE_BEFORE_MINUTES = 5
CHECKIN_LATE_THRESHOLD_MINUTES = 15
TOKEN_ROTATION_SECONDS = 20
LOCATION_TIMEOUT_SECONDS = 1
LOCATION_MAX_AGE_SECONDS = 60
TIMEZONE = "UTC"

AT_RISK_THRESHOLD = 3
TREND_DAYS = 7

ROTATION_SCHEDULER_ENABLED = False
