import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# memory | mysql
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geosales_db"),
}

DEBUG = True

# If enabled (mysql backend), app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the demo accounts on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))

# Engine tunables
WORK_START_HOUR = int(os.getenv("WORK_START_HOUR", "10"))
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
TERRITORY_RADIUS_METERS = float(os.getenv("TERRITORY_RADIUS_METERS", "10000"))
VIOLATION_COOLDOWN_SECONDS = float(os.getenv("VIOLATION_COOLDOWN_SECONDS", "900"))
PERIODIC_INTERVAL_SECONDS = float(os.getenv("PERIODIC_INTERVAL_SECONDS", "600"))
LOCATION_TIMEOUT_SECONDS = float(os.getenv("LOCATION_TIMEOUT_SECONDS", "10"))
LOCATION_MAX_AGE_SECONDS = float(os.getenv("LOCATION_MAX_AGE_SECONDS", "30"))
