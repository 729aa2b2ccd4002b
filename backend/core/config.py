import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


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
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:4200"])

SLOT_TIMEZONE = os.getenv("SLOT_TIMEZONE", "Europe/Berlin")
SLOT_DURATION_MINUTES = _get_int(os.getenv("SLOT_DURATION_MINUTES"), 30)
SLOT_HORIZON_WEEKS = _get_int(os.getenv("SLOT_HORIZON_WEEKS"), 4)

DEFAULT_PAGE_SIZE = _get_int(os.getenv("DEFAULT_PAGE_SIZE"), 20)
MAX_PAGE_SIZE = _get_int(os.getenv("MAX_PAGE_SIZE"), 100)


def slot_zone() -> ZoneInfo:
    return ZoneInfo(SLOT_TIMEZONE)


def validate_runtime_config() -> None:
    try:
        slot_zone()
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"SLOT_TIMEZONE '{SLOT_TIMEZONE}' is not a known time zone.") from exc

    if SLOT_DURATION_MINUTES <= 0:
        raise RuntimeError("SLOT_DURATION_MINUTES must be positive.")
    if SLOT_HORIZON_WEEKS <= 0:
        raise RuntimeError("SLOT_HORIZON_WEEKS must be positive.")
    if DEFAULT_PAGE_SIZE <= 0 or MAX_PAGE_SIZE < DEFAULT_PAGE_SIZE:
        raise RuntimeError("DEFAULT_PAGE_SIZE must be positive and not exceed MAX_PAGE_SIZE.")
