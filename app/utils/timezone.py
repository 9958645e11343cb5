"""
Date and Time utilities

This module handles local timestamp parsing/formatting and broadcast-day
window calculations. The listings backend speaks naive local time
(``YYYY-MM-DDTHH:mm:ss``), so every datetime leaving this module is naive and
expressed in the guide's timezone.
"""
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo
import logging


logger = logging.getLogger(__name__)

LOCAL_FORMAT = "%Y-%m-%dT%H:%M:%S"

BROADCAST_DAY_START = time(6, 0)
# Window closes at 07:00 on the following calendar day
BROADCAST_DAY_END = time(7, 0)


class DateFormatError(ValueError):
    """Raised when date format is invalid"""
    pass


def _zone(tz_name: str | None) -> ZoneInfo | None:
    return ZoneInfo(tz_name) if tz_name else None


def parse_local(value: str, tz_name: str | None = None) -> datetime:
    """
    Parse an ISO8601 timestamp into a naive local datetime

    Timestamps carrying an offset (or 'Z') are converted to the guide timezone
    (system local time when tz_name is None) before the offset is dropped.

    Raises:
        DateFormatError: If the string is not a valid ISO8601 timestamp
    """
    try:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    except (ValueError, AttributeError, TypeError) as e:
        raise DateFormatError(f"Invalid local datetime format: '{value}'") from e

    if dt.tzinfo is None:
        return dt
    return dt.astimezone(_zone(tz_name)).replace(tzinfo=None)


def parse_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD date

    Raises:
        DateFormatError: If the string is not a valid date
    """
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError, TypeError) as e:
        raise DateFormatError(f"Invalid date format: '{value}'. Expected YYYY-MM-DD") from e


def format_local(dt: datetime) -> str:
    """Format as YYYY-MM-DDTHH:mm:ss with no timezone offset"""
    return dt.strftime(LOCAL_FORMAT)


def local_now(tz_name: str | None = None) -> datetime:
    """Current wall-clock time as a naive datetime in the guide timezone"""
    zone = _zone(tz_name)
    if zone is None:
        return datetime.now()
    return datetime.now(zone).replace(tzinfo=None)


def broadcast_date(now: datetime) -> date:
    """
    Broadcast day a wall-clock instant belongs to

    Before 06:00 the previous calendar date is still "today" on the guide.
    """
    if now.time() < BROADCAST_DAY_START:
        return now.date() - timedelta(days=1)
    return now.date()


def broadcast_window(day: date) -> tuple[datetime, datetime]:
    """
    Calculate the display/query window for one broadcast day

    Args:
        day: Reference (broadcast) date

    Returns:
        Tuple of (06:00 on day, 07:00 on the next day)
    """
    start = datetime.combine(day, BROADCAST_DAY_START)
    end = datetime.combine(day + timedelta(days=1), BROADCAST_DAY_END)
    return start, end
