import os

SECRET_KEY = "test-secret"

STORE_BACKEND = "memory"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geosales_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = True

WORK_START_HOUR = 10
LATE_GRACE_MINUTES = 15
TERRITORY_RADIUS_METERS = 10000.0
VIOLATION_COOLDOWN_SECONDS = 900.0
PERIODIC_INTERVAL_SECONDS = 600.0
LOCATION_TIMEOUT_SECONDS = 0.2
LOCATION_MAX_AGE_SECONDS = 30.0
