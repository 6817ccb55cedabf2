import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "biometric_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Terminal protocol
DEVICE_PORT = int(os.getenv("DEVICE_PORT", "5010"))
DEVICE_CONNECT_TIMEOUT = float(os.getenv("DEVICE_CONNECT_TIMEOUT", "5.0"))
DEVICE_COMMAND_TIMEOUT = float(os.getenv("DEVICE_COMMAND_TIMEOUT", "2.0"))
DEVICE_DOWNLOAD_BATCH = int(os.getenv("DEVICE_DOWNLOAD_BATCH", "25"))
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "1.0"))

# Reconciliation
OVERTIME_CHECKOUT_MINUTES = int(os.getenv("OVERTIME_CHECKOUT_MINUTES", "30"))
RECORD_MAX_YEAR_DRIFT = int(os.getenv("RECORD_MAX_YEAR_DRIFT", "5"))
RECORD_MAX_ATTEMPTS = int(os.getenv("RECORD_MAX_ATTEMPTS", "3"))
