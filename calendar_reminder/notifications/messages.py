"""
Structured webhook bodies (Discord embed format) for reminders and digests.
"""

import math
from datetime import datetime, timezone

from ..calendar.occurrences import CalendarOccurrence
from ..config import get_display_timezone
from ..timezone import (
    format_date_in_timezone,
    format_datetime_in_timezone,
    format_time_in_timezone,
)
from .templates import get_message


REMINDER_COLOR = 0x7C3AED
DIGEST_COLOR = 0x4ADE80


def _round_half_up(value: float) -> int:
    """Nearest whole number with halves rounded up, e.g. 6.5 -> 7."""
    return math.floor(value + 0.5)


def build_reminder_message(
    occurrence: CalendarOccurrence,
    minutes_until: float,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Build the body for a single upcoming-occurrence reminder.

    Minutes remaining are rounded to the nearest whole minute, halves up.
    """
    tz_name = tz_name or get_display_timezone()
    now = now or datetime.now(timezone.utc)

    fields = [
        {
            "name": get_message("event_reminder", "start_label"),
            "value": format_datetime_in_timezone(occurrence.start, tz_name),
            "inline": True,
        },
        {
            "name": get_message("event_reminder", "remaining_label"),
            "value": get_message(
                "event_reminder",
                "remaining_value",
                {"minutes": _round_half_up(minutes_until)},
            ),
            "inline": True,
        },
    ]
    if occurrence.location:
        fields.append(
            {
                "name": get_message("event_reminder", "location_label"),
                "value": occurrence.location,
                "inline": False,
            }
        )

    content = get_message("event_reminder", "content")
    if occurrence.html_link:
        content += get_message(
            "event_reminder", "link", {"html_link": occurrence.html_link}
        )

    return {
        "content": content,
        "embeds": [
            {
                "title": get_message(
                    "event_reminder", "title", {"summary": occurrence.summary}
                ),
                "color": REMINDER_COLOR,
                "fields": fields,
                "timestamp": now.isoformat(),
            }
        ],
    }


def format_digest_lines(
    occurrences: list[CalendarOccurrence],
    tz_name: str,
) -> str:
    """Numbered list of occurrences, or the "no occurrences" sentence."""
    if not occurrences:
        return get_message("daily_digest", "empty")

    lines = []
    for index, occurrence in enumerate(occurrences, start=1):
        location = (
            get_message("daily_digest", "item_location", {"location": occurrence.location})
            if occurrence.location
            else ""
        )
        lines.append(
            get_message(
                "daily_digest",
                "item",
                {
                    "index": index,
                    "time": format_time_in_timezone(occurrence.start, tz_name),
                    "summary": occurrence.summary,
                    "location": location,
                },
            )
        )
    return "\n".join(lines)


def build_digest_message(
    occurrences: list[CalendarOccurrence],
    footer: str,
    tz_name: str | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Build the body for the once-daily digest.

    Args:
        occurrences: The day's occurrences, already sorted by start
        footer: Shown under the embed (the user's email)
        tz_name: Display timezone; the heading shows `now`'s local date
        now: Send time (defaults to the current time)
    """
    tz_name = tz_name or get_display_timezone()
    now = now or datetime.now(timezone.utc)

    return {
        "content": get_message("daily_digest", "content"),
        "embeds": [
            {
                "title": get_message(
                    "daily_digest",
                    "title",
                    {"date": format_date_in_timezone(now, tz_name)},
                ),
                "description": format_digest_lines(occurrences, tz_name),
                "color": DIGEST_COLOR,
                "fields": [
                    {
                        "name": get_message("daily_digest", "count_label"),
                        "value": get_message(
                            "daily_digest", "count_value", {"count": len(occurrences)}
                        ),
                        "inline": True,
                    }
                ],
                "timestamp": now.isoformat(),
                "footer": {"text": footer},
            }
        ],
    }
