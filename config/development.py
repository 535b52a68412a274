import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "স্কুল")

# Bulk SMS worker pool size; 1 sends one message at a time.
SMS_MAX_CONCURRENCY = int(os.getenv("SMS_MAX_CONCURRENCY", "5"))
SMS_HTTP_TIMEOUT = float(os.getenv("SMS_HTTP_TIMEOUT", "15"))

BALANCE_CACHE_TTL_SECONDS = float(os.getenv("BALANCE_CACHE_TTL_SECONDS", "60"))

# Collation for name sorting; empty means the process environment (LANG/LC_ALL).
COLLATION_LOCALE = os.getenv("COLLATION_LOCALE", "")
