import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Africa/Addis_Ababa")
APP_URL = os.getenv("APP_URL", "http://localhost:5000")

# Minutes around the scheduled boundary during which a token can be redeemed.
WINDOW_POLICY = {
    "arrival_opens_before": int(os.getenv("ARRIVAL_OPENS_BEFORE", "30")),
    "arrival_closes_after": int(os.getenv("ARRIVAL_CLOSES_AFTER", "120")),
    "departure_opens_before": int(os.getenv("DEPARTURE_OPENS_BEFORE", "120")),
    "departure_closes_after": int(os.getenv("DEPARTURE_CLOSES_AFTER", "120")),
}
VERY_LATE_DEPARTURE_MINUTES = int(os.getenv("VERY_LATE_DEPARTURE_MINUTES", "30"))
SCHEDULE_TOLERANCE_MINUTES = int(os.getenv("SCHEDULE_TOLERANCE_MINUTES", "2"))

# log | smtp | http
DELIVERY_BACKEND = os.getenv("DELIVERY_BACKEND", "log")
DELIVERY_MAX_RETRIES = int(os.getenv("DELIVERY_MAX_RETRIES", "3"))
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "attendance@localhost")
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "")
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY", "")
