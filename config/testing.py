import os

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TIMEZONE = "UTC"

BATCH_SOURCE = "http"
ATTENDANCE_API_URL = "http://attendance.test"
ATTENDANCE_API_TOKEN = "test-token"
HTTP_TIMEOUT_SECONDS = 5.0

LIVE_EVENTS_URL = ""

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_test"),
}

PAGE_SIZE = 30
FALLBACK_FETCH_LIMIT = 500
AUTO_REFRESH_SECONDS = 30.0
NOTICE_DISPLAY_SECONDS = 5.0
