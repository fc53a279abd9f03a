import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "coaching_db"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Calendar used for "today" when a write omits the date
REFERENCE_TIMEZONE = os.getenv("REFERENCE_TIMEZONE", "Asia/Kolkata")
LATE_WEIGHT = float(os.getenv("LATE_WEIGHT", "0.5"))

LOG_JSON = bool(int(os.getenv("LOG_JSON", "0")))
