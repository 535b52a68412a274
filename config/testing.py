import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SCHOOL_NAME = "স্কুল"

SMS_MAX_CONCURRENCY = 1
SMS_HTTP_TIMEOUT = 5.0

# No caching under test: every read goes to the store.
BALANCE_CACHE_TTL_SECONDS = 0

COLLATION_LOCALE = ""
