import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_attendance"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

CHECKIN_GRACE_BEFORE_MINUTES = int(os.getenv("CHECKIN_GRACE_BEFORE_MINUTES", "5"))
CHECKIN_LATE_THRESHOLD_MINUTES = int(os.getenv("CHECKIN_LATE_THRESHOLD_MINUTES", "15"))
TOKEN_ROTATION_SECONDS = int(os.getenv("TOKEN_ROTATION_SECONDS", "20"))
LOCATION_TIMEOUT_SECONDS = float(os.getenv("LOCATION_TIMEOUT_SECONDS", "10"))
LOCATION_MAX_AGE_SECONDS = int(os.getenv("LOCATION_MAX_AGE_SECONDS", "60"))
TIMEZONE = os.getenv("TIMEZONE", "UTC")

AT_RISK_THRESHOLD = int(os.getenv("AT_RISK_THRESHOLD", "3"))
TREND_DAYS = int(os.getenv("TREND_DAYS", "7"))

ROTATION_SCHEDULER_ENABLED = bool(int(os.getenv("ROTATION_SCHEDULER_ENABLED", "1")))
