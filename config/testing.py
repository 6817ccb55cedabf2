import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "biometric_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

DEVICE_PORT = 5010
DEVICE_CONNECT_TIMEOUT = 1.0
DEVICE_COMMAND_TIMEOUT = 0.5
DEVICE_DOWNLOAD_BATCH = 25
POLL_INTERVAL_SECONDS = 0.1

OVERTIME_CHECKOUT_MINUTES = 30
RECORD_MAX_YEAR_DRIFT = 5
RECORD_MAX_ATTEMPTS = 2
