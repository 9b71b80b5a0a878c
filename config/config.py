import os


def env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": env_int("DB_PORT", 3306),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "attendance_otc"),
    }


def mail_config() -> dict:
    return {
        "server": os.getenv("MAIL_SERVER", ""),
        "port": env_int("MAIL_PORT", 465),
        "username": os.getenv("MAIL_USERNAME", ""),
        "password": os.getenv("MAIL_PASSWORD", ""),
        "use_ssl": env_bool("MAIL_USE_SSL", "1"),
        "sender_name": os.getenv("MAIL_SENDER_NAME", "Attendance"),
    }


# Shared by every environment
TIMEZONE = os.getenv("TIMEZONE", "UTC")

OTP_LENGTH = env_int("OTP_LENGTH", 6)
OTP_EXPIRY_MINUTES = env_int("OTP_EXPIRY_MINUTES", 3)
OTP_MAX_ATTEMPTS = env_int("OTP_MAX_ATTEMPTS", 3)
OTP_RATE_LIMIT = env_int("OTP_RATE_LIMIT", 5)
OTP_RATE_WINDOW_SECONDS = env_int("OTP_RATE_WINDOW_SECONDS", 900)

LOG_DIR = os.getenv("LOG_DIR", "logs")
