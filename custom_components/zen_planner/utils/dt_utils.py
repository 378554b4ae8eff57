# File: utils/dt_utils.py
"""Date and time utilities for Zen Planner.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Uses standard library datetime/zoneinfo plus python-dateutil for parsing
client-supplied ISO 8601 timestamps.

Functions:
    - set_default_timezone / get_default_timezone: Configure the local zone
    - dt_today_local: Today's date in the local timezone
    - dt_now_utc / dt_now_iso: Current instant (aware) and its ISO string
    - as_local: Convert an aware datetime to the local timezone
    - dt_parse_date: Parse a calendar date string
    - dt_parse_time: Parse an HH:MM time string
    - dt_parse: Parse an ISO 8601 timestamp to an aware datetime
    - dt_local_date: Local calendar date of an ISO timestamp
    - dt_combine_local: Build an aware local datetime from date + HH:MM
    - dt_last_n_days: Consecutive dates ending at a given day, oldest first
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
from zoneinfo import ZoneInfo

from dateutil import parser as dateutil_parser

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - replaced during integration setup
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC instant as an ISO 8601 string.

    Example:
        "2025-04-07T19:30:00.123456+00:00"
    """
    return dt_now_utc().isoformat()


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to be UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts a bare ISO date ("2025-04-07") or the date part of a full ISO
    timestamp ("2025-04-07T10:00:00Z"), which is how browsers tend to send
    date-only fields.

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str[:10])
    except ValueError:
        _LOGGER.debug("Unparseable date string: %s", date_str)
        return None


def dt_parse_time(time_str: str | None) -> time | None:
    """Parse an "HH:MM" (or "HH:MM:SS") string into a `datetime.time`."""
    if not time_str or not isinstance(time_str, str):
        return None

    try:
        return time.fromisoformat(time_str)
    except ValueError:
        _LOGGER.debug("Unparseable time string: %s", time_str)
        return None


def dt_parse(dt_str: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp into a timezone-aware datetime.

    Naive timestamps are interpreted as UTC, matching how they are written.
    """
    if not dt_str or not isinstance(dt_str, str):
        return None

    try:
        parsed = dateutil_parser.isoparse(dt_str)
    except (ValueError, OverflowError):
        _LOGGER.debug("Unparseable timestamp: %s", dt_str)
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def dt_local_date(dt_str: str | None, tz: ZoneInfo | None = None) -> date | None:
    """Return the local calendar date of an ISO 8601 timestamp."""
    parsed = dt_parse(dt_str)
    if parsed is None:
        return None
    return as_local(parsed, tz).date()


# ==============================================================================
# Construction
# ==============================================================================


def dt_combine_local(
    day: date, time_str: str | None = None, tz: ZoneInfo | None = None
) -> datetime:
    """Build an aware datetime in local time from a date and optional HH:MM.

    A missing or unparseable time resolves to local midnight.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    parsed_time = dt_parse_time(time_str) or time.min
    return datetime.combine(day, parsed_time, tzinfo=tz_info)


def dt_last_n_days(end: date, days: int) -> list[date]:
    """Return `days` consecutive dates ending at `end`, oldest first.

    Example:
        dt_last_n_days(date(2025, 4, 7), 3)
        → [date(2025, 4, 5), date(2025, 4, 6), date(2025, 4, 7)]
    """
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
