import os
from datetime import datetime, time

from dotenv import load_dotenv

load_dotenv()


def _get_time(value: str | None, default: str) -> time:
    raw = (value or default).strip()
    return datetime.strptime(raw, "%H:%M").time()


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:3000"])

# Clinic-wide working day. Read once at import; never mutated afterwards.
AGENDA_WORKDAY_START = _get_time(os.getenv("AGENDA_WORKDAY_START"), "07:00")
AGENDA_WORKDAY_END = _get_time(os.getenv("AGENDA_WORKDAY_END"), "21:00")
AGENDA_LUNCH_START = _get_time(os.getenv("AGENDA_LUNCH_START"), "13:00")
AGENDA_LUNCH_END = _get_time(os.getenv("AGENDA_LUNCH_END"), "15:00")
AGENDA_SLOT_INTERVAL_MINUTES = _get_int(os.getenv("AGENDA_SLOT_INTERVAL_MINUTES"), 15)
AGENDA_MIN_GAP_MINUTES = _get_int(os.getenv("AGENDA_MIN_GAP_MINUTES"), 15)
AGENDA_MAX_GAPS = _get_int(os.getenv("AGENDA_MAX_GAPS"), 6)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if AGENDA_WORKDAY_START >= AGENDA_WORKDAY_END:
        raise RuntimeError("AGENDA_WORKDAY_START must be earlier than AGENDA_WORKDAY_END.")
    if AGENDA_LUNCH_START >= AGENDA_LUNCH_END:
        raise RuntimeError("AGENDA_LUNCH_START must be earlier than AGENDA_LUNCH_END.")
