import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d)?$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_time(value: str) -> str:
    """Validate "HH:MM" (seconds tolerated) and return "HH:MM"."""
    if not TIME_RE.match(value):
        raise ValueError(f"invalid time format: {value}")
    return value[:5]


def validate_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone: {value}") from e
    return value


def validate_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_RE.match(value) or len(value) > 254:
        raise ValueError("invalid email address")
    return value
