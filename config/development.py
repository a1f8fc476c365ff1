import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# "Today" and the end-of-day cutoff are computed in this zone
FACILITY_TIMEZONE = os.getenv("FACILITY_TIMEZONE", "Asia/Kolkata")

# Auto-checkout: close sessions at the earlier of end of day and check-in + max hours
AUTO_CHECKOUT_ENABLED = bool(int(os.getenv("AUTO_CHECKOUT_ENABLED", "1")))
AUTO_CHECKOUT_INTERVAL_MINUTES = int(os.getenv("AUTO_CHECKOUT_INTERVAL_MINUTES", "15"))
AUTO_CHECKOUT_END_OF_DAY = bool(int(os.getenv("AUTO_CHECKOUT_END_OF_DAY", "1")))
AUTO_CHECKOUT_MAX_SESSION_HOURS = float(os.getenv("AUTO_CHECKOUT_MAX_SESSION_HOURS", "3"))

DASHBOARD_POLL_SECONDS = int(os.getenv("DASHBOARD_POLL_SECONDS", "5"))
STORAGE_RETRY_BACKOFF_SECONDS = float(os.getenv("STORAGE_RETRY_BACKOFF_SECONDS", "0.2"))
