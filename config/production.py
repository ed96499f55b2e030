import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "timeclock"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")
ATTENDANCE_TIMEZONE = os.getenv("ATTENDANCE_TIMEZONE", "UTC")
CONCURRENCY_MAX_RETRIES = int(os.getenv("CONCURRENCY_MAX_RETRIES", "3"))
AUTO_CLOSE_BREAK_ON_CLOCK_OUT = bool(int(os.getenv("AUTO_CLOSE_BREAK_ON_CLOCK_OUT", "1")))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
