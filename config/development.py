import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
}

# mysql | memory
STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

# Work dates are calendar days in this timezone.
ATTENDANCE_TIMEZONE = os.getenv("ATTENDANCE_TIMEZONE", "UTC")

CONCURRENCY_MAX_RETRIES = int(os.getenv("CONCURRENCY_MAX_RETRIES", "3"))

# 0 = reject clock-out while on break instead of closing the break.
AUTO_CLOSE_BREAK_ON_CLOCK_OUT = bool(int(os.getenv("AUTO_CLOSE_BREAK_ON_CLOCK_OUT", "1")))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo directory data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
