import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./vetclinic.db")
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["http://localhost:3000"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Business hours drive slot generation; local business time, naive datetimes.
BUSINESS_OPEN_HOUR = int(os.getenv("BUSINESS_OPEN_HOUR", "9"))
BUSINESS_CLOSE_HOUR = int(os.getenv("BUSINESS_CLOSE_HOUR", "17"))
SLOT_INTERVAL_MINUTES = int(os.getenv("SLOT_INTERVAL_MINUTES", "30"))

CLIENT_CANCELLATION_WINDOW_HOURS = int(os.getenv("CLIENT_CANCELLATION_WINDOW_HOURS", "2"))
CONFIRMATION_LEAD_HOURS = int(os.getenv("CONFIRMATION_LEAD_HOURS", "24"))
REMINDER_LEAD_HOURS = int(os.getenv("REMINDER_LEAD_HOURS", "2"))
FOLLOW_UP_DAYS = int(os.getenv("FOLLOW_UP_DAYS", "7"))
CANCELLATION_FOLLOW_UP_HOURS = int(os.getenv("CANCELLATION_FOLLOW_UP_HOURS", "24"))

MIN_SERVICE_DURATION_MINUTES = int(os.getenv("MIN_SERVICE_DURATION_MINUTES", "15"))
MAX_APPOINTMENT_NOTES_LENGTH = 600

SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@vetclinic.local")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "change-me-now")


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if not 0 <= BUSINESS_OPEN_HOUR < BUSINESS_CLOSE_HOUR <= 24:
        raise RuntimeError("BUSINESS_OPEN_HOUR must be before BUSINESS_CLOSE_HOUR, both within 0-24.")
    if SLOT_INTERVAL_MINUTES <= 0:
        raise RuntimeError("SLOT_INTERVAL_MINUTES must be positive.")
