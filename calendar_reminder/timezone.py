"""
Timezone conversion and formatting utilities.

All messages are rendered in a single display timezone (DISPLAY_TIMEZONE),
not per user.
"""

from datetime import date, datetime, time, timedelta

import pytz


def get_tz(tz_name: str):
    """Resolve a timezone name, falling back to UTC for unknown names."""
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def to_local(utc_dt: datetime, tz_name: str) -> datetime:
    """Convert a datetime to the given timezone (naive datetimes treated as UTC)."""
    if utc_dt.tzinfo is None:
        utc_dt = pytz.UTC.localize(utc_dt)
    return utc_dt.astimezone(get_tz(tz_name))


def _offset_label(local_dt: datetime) -> str:
    """UTC offset as "UTC+9", "UTC-5:30" or "UTC"."""
    offset = local_dt.strftime("%z")  # "+0900" or "-0530"
    if not offset:
        return "UTC"
    hours = int(offset[:3])
    minutes = int(offset[0] + offset[3:5])
    if minutes == 0:
        return f"UTC{hours:+d}" if hours != 0 else "UTC"
    return f"UTC{hours:+d}:{abs(minutes):02d}"


def format_datetime_in_timezone(utc_dt: datetime, tz_name: str) -> str:
    """
    Format an instant as a short local date and time with explicit offset.

    Returns:
        Formatted string like "2024-01-11 (Thu) 00:00 (UTC+9)"
    """
    local_dt = to_local(utc_dt, tz_name)
    return f"{local_dt.strftime('%Y-%m-%d (%a) %H:%M')} ({_offset_label(local_dt)})"


def format_time_in_timezone(utc_dt: datetime, tz_name: str) -> str:
    """Format just the local wall-clock time, e.g. "09:30"."""
    return to_local(utc_dt, tz_name).strftime("%H:%M")


def format_date_in_timezone(utc_dt: datetime, tz_name: str) -> str:
    """
    Format an instant as a long local date.

    Returns:
        Formatted string like "Thursday, January 11, 2024"
    """
    local_dt = to_local(utc_dt, tz_name)
    return local_dt.strftime("%A, %B %d, %Y").replace(" 0", " ")


def local_midnight(day: date, tz_name: str) -> datetime:
    """Aware datetime for 00:00 of a local calendar day."""
    return get_tz(tz_name).localize(datetime.combine(day, time.min))


def local_day_bounds(now: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """
    Half-open [start, end) of the local calendar day containing `now`.

    Both bounds are local midnights, so DST days are 23 or 25 hours long.
    """
    local_day = to_local(now, tz_name).date()
    return (
        local_midnight(local_day, tz_name),
        local_midnight(local_day + timedelta(days=1), tz_name),
    )
