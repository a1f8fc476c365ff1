import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

FACILITY_TIMEZONE = "Asia/Kolkata"

# Tests drive the reconciler directly.
AUTO_CHECKOUT_ENABLED = False
AUTO_CHECKOUT_INTERVAL_MINUTES = 15
AUTO_CHECKOUT_END_OF_DAY = True
AUTO_CHECKOUT_MAX_SESSION_HOURS = 3.0

DASHBOARD_POLL_SECONDS = 5
STORAGE_RETRY_BACKOFF_SECONDS = 0.0
