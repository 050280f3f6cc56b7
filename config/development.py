import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "guild_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Also insert the default mains and the owner account from OWNER_* below
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "guild_session")
SESSION_MAX_AGE_SECONDS = int(os.getenv("SESSION_MAX_AGE_SECONDS", str(24 * 60 * 60)))
SESSION_COOKIE_SECURE = bool(int(os.getenv("SESSION_COOKIE_SECURE", "0")))

SUBMISSION_UTC_OFFSET_HOURS = int(os.getenv("SUBMISSION_UTC_OFFSET_HOURS", "8"))
SUBMISSION_WINDOW_START_HOUR = int(os.getenv("SUBMISSION_WINDOW_START_HOUR", "5"))
SUBMISSION_WINDOW_END_HOUR = int(os.getenv("SUBMISSION_WINDOW_END_HOUR", "22"))

SHIFT_REPORT_MAX_AGE_DAYS = int(os.getenv("SHIFT_REPORT_MAX_AGE_DAYS", "30"))

OWNER_USERNAME = os.getenv("OWNER_USERNAME")
OWNER_PASSWORD = os.getenv("OWNER_PASSWORD")
OWNER_EMAIL = os.getenv("OWNER_EMAIL")
