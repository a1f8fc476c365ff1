import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

FACILITY_TIMEZONE = os.getenv("FACILITY_TIMEZONE", "Asia/Kolkata")

AUTO_CHECKOUT_ENABLED = bool(int(os.getenv("AUTO_CHECKOUT_ENABLED", "1")))
AUTO_CHECKOUT_INTERVAL_MINUTES = int(os.getenv("AUTO_CHECKOUT_INTERVAL_MINUTES", "15"))
AUTO_CHECKOUT_END_OF_DAY = bool(int(os.getenv("AUTO_CHECKOUT_END_OF_DAY", "1")))
AUTO_CHECKOUT_MAX_SESSION_HOURS = float(os.getenv("AUTO_CHECKOUT_MAX_SESSION_HOURS", "3"))

DASHBOARD_POLL_SECONDS = int(os.getenv("DASHBOARD_POLL_SECONDS", "5"))
STORAGE_RETRY_BACKOFF_SECONDS = float(os.getenv("STORAGE_RETRY_BACKOFF_SECONDS", "0.2"))
