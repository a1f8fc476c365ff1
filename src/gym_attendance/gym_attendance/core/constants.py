"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_FACILITY_TIMEZONE = "Asia/Kolkata"
DEFAULT_MAX_SESSION_HOURS = 3
DEFAULT_SWEEP_INTERVAL_MINUTES = 15
DEFAULT_POLL_SECONDS = 5
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_HISTORY_DAYS = 7
DEFAULT_RETRY_BACKOFF_SECONDS = 0.2

QR_PAYLOAD_TYPE = "gym_attendance"
QR_SECRET_LENGTH = 32
