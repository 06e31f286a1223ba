import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

TIMEZONE = os.getenv("TIMEZONE", "")

BATCH_SOURCE = os.getenv("BATCH_SOURCE", "http")
ATTENDANCE_API_URL = os.getenv("ATTENDANCE_API_URL", "")
ATTENDANCE_API_TOKEN = os.getenv("ATTENDANCE_API_TOKEN", "")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

LIVE_EVENTS_URL = os.getenv("LIVE_EVENTS_URL", "")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

PAGE_SIZE = int(os.getenv("PAGE_SIZE", "30"))
FALLBACK_FETCH_LIMIT = int(os.getenv("FALLBACK_FETCH_LIMIT", "500"))
AUTO_REFRESH_SECONDS = float(os.getenv("AUTO_REFRESH_SECONDS", "30"))
NOTICE_DISPLAY_SECONDS = float(os.getenv("NOTICE_DISPLAY_SECONDS", "5"))
