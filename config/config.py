"""Settings shared by every environment.

Environment modules start from these values and override what differs.
"""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hojaverde_db"),
    "connection_timeout": int(os.getenv("DB_CONNECTION_TIMEOUT", "10")),
}

# Seconds a statement waits on a row lock before the batch fails.
LOCK_WAIT_TIMEOUT = int(os.getenv("LOCK_WAIT_TIMEOUT", "30"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB")

MAX_BULK_RECORDS = int(os.getenv("MAX_BULK_RECORDS", "1000"))
MAX_REPORTED_ERRORS = int(os.getenv("MAX_REPORTED_ERRORS", "10"))
DEFAULT_WORKING_HOURS = int(os.getenv("DEFAULT_WORKING_HOURS", "8"))
REQUIRE_PERMISSION_REASON = env_flag("REQUIRE_PERMISSION_REASON")
