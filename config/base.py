"""Settings shared by every environment; values come from the environment."""
import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "kiosk_attendance"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Nightly missing-logout check, 13:30 UTC = 22:30 JST
ENABLE_SCHEDULER = env_flag("ENABLE_SCHEDULER", "0")
RECONCILE_HOUR_UTC = int(os.getenv("RECONCILE_HOUR_UTC", "13"))
RECONCILE_MINUTE_UTC = int(os.getenv("RECONCILE_MINUTE_UTC", "30"))
SYSTEM_LOGOUT_HOUR = int(os.getenv("SYSTEM_LOGOUT_HOUR", "22"))
MAX_WRITE_ATTEMPTS = int(os.getenv("MAX_WRITE_ATTEMPTS", "3"))

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "ELife International School")

# 'log' or 'smtp'
NOTIFIER = os.getenv("NOTIFIER", "log")
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_SENDER = os.getenv("SMTP_SENDER", "noreply@example.com")
SMTP_USE_TLS = env_flag("SMTP_USE_TLS", "1")
