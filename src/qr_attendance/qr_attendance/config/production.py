import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Africa/Addis_Ababa")
APP_URL = os.getenv("APP_URL", "https://attendance.example.com")

WINDOW_POLICY = {
    "arrival_opens_before": int(os.getenv("ARRIVAL_OPENS_BEFORE", "30")),
    "arrival_closes_after": int(os.getenv("ARRIVAL_CLOSES_AFTER", "120")),
    "departure_opens_before": int(os.getenv("DEPARTURE_OPENS_BEFORE", "120")),
    "departure_closes_after": int(os.getenv("DEPARTURE_CLOSES_AFTER", "120")),
}
VERY_LATE_DEPARTURE_MINUTES = int(os.getenv("VERY_LATE_DEPARTURE_MINUTES", "30"))
SCHEDULE_TOLERANCE_MINUTES = int(os.getenv("SCHEDULE_TOLERANCE_MINUTES", "2"))

DELIVERY_BACKEND = os.getenv("DELIVERY_BACKEND", "smtp")
DELIVERY_MAX_RETRIES = int(os.getenv("DELIVERY_MAX_RETRIES", "3"))
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "")
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "")
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY", "")
