import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ORG_TIMEZONE = "Africa/Addis_Ababa"
APP_URL = "http://testserver"

WINDOW_POLICY = {
    "arrival_opens_before": 30,
    "arrival_closes_after": 120,
    "departure_opens_before": 120,
    "departure_closes_after": 120,
}
VERY_LATE_DEPARTURE_MINUTES = 30
SCHEDULE_TOLERANCE_MINUTES = 2

DELIVERY_BACKEND = "log"
DELIVERY_MAX_RETRIES = 3
EMAIL_SENDER = "attendance@testserver"
