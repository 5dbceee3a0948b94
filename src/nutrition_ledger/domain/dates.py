"""Calendar date keys used by daily records."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from nutrition_ledger.domain.errors import InvalidInput

DATE_KEY_FORMAT = "%Y-%m-%d"


def format_date_key(day: date) -> str:
    """Return the YYYY-MM-DD key for a date."""
    return day.strftime(DATE_KEY_FORMAT)


def parse_date_key(value: str, field: str = "date") -> date:
    """Parse a YYYY-MM-DD key, raising InvalidInput when malformed."""
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise InvalidInput(field, f"expected YYYY-MM-DD, got {value!r}") from exc


def days_between(earlier: date, later: date) -> int:
    """Return the signed number of calendar days from earlier to later."""
    return (later - earlier).days


def today(timezone_name: str | None = None) -> date:
    """Return the wall-clock date in a timezone, or the host local date."""
    if timezone_name:
        return datetime.now(tz=ZoneInfo(timezone_name)).date()
    return date.today()  # noqa: DTZ011


def today_key(timezone_name: str | None = None) -> str:
    """Return today's date key."""
    return format_date_key(today(timezone_name))
