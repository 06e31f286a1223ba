import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Viewer's timezone (IANA name); empty means the server's local zone
TIMEZONE = os.getenv("TIMEZONE", "")

# Where attendance records come from: "http" (REST API) or "mysql"
BATCH_SOURCE = os.getenv("BATCH_SOURCE", "http")
ATTENDANCE_API_URL = os.getenv("ATTENDANCE_API_URL", "http://localhost:5000")
ATTENDANCE_API_TOKEN = os.getenv("ATTENDANCE_API_TOKEN", "")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

# Socket.IO server for live updates; empty disables them
LIVE_EVENTS_URL = os.getenv("LIVE_EVENTS_URL", "http://localhost:5000")

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
