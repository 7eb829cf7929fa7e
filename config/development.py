import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_attendance"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Check-in policy
CHECKIN_GRACE_BEFORE_MINUTES = int(os.getenv("CHECKIN_GRACE_BEFORE_MINUTES", "5"))
CHECKIN_LATE_THRESHOLD_MINUTES = int(os.getenv("CHECKIN_LATE_THRESHOLD_MINUTES", "15"))
TOKEN_ROTATION_SECONDS = int(os.getenv("TOKEN_ROTATION_SECONDS", "20"))
LOCATION_TIMEOUT_SECONDS = float(os.getenv("LOCATION_TIMEOUT_SECONDS", "10"))
LOCATION_MAX_AGE_SECONDS = int(os.getenv("LOCATION_MAX_AGE_SECONDS", "60"))
TIMEZONE = os.getenv("TIMEZONE", "UTC")

AT_RISK_THRESHOLD = int(os.getenv("AT_RISK_THRESHOLD", "3"))
TREND_DAYS = int(os.getenv("TREND_DAYS", "7"))

ROTATION_SCHEDULER_ENABLED = bool(int(os.getenv("ROTATION_SCHEDULER_ENABLED", "1")))
