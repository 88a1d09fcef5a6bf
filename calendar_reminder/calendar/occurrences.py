"""Calendar occurrence model and parsing of Google Calendar event resources."""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime

from ..config import get_display_timezone
from ..timezone import get_tz, local_midnight

logger = logging.getLogger(__name__)


UNTITLED = "(No title)"


@dataclass(frozen=True)
class CalendarOccurrence:
    """One concrete instance of an event. Built fresh on every fetch, never stored."""

    id: str
    summary: str
    start: datetime  # timezone-aware
    location: str | None = None
    html_link: str | None = None
    calendar_id: str | None = None

    @property
    def start_unix(self) -> int:
        """Start instant in whole unix seconds (the dedup key component)."""
        return math.floor(self.start.timestamp())


def parse_event_start(start: dict, tz_name: str | None = None) -> datetime | None:
    """
    Parse an event's "start" object into an aware datetime.

    Timed events carry "dateTime" (RFC3339). All-day events carry only
    "date" and are placed at local midnight of the display timezone.
    Returns None when neither is present or the value is unparseable.
    """
    tz_name = tz_name or get_display_timezone()

    date_time = start.get("dateTime")
    if date_time:
        try:
            parsed = datetime.fromisoformat(date_time.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = get_tz(start.get("timeZone") or tz_name).localize(parsed)
        return parsed

    all_day = start.get("date")
    if all_day:
        try:
            return local_midnight(date.fromisoformat(all_day), tz_name)
        except ValueError:
            return None

    return None


def parse_occurrence(
    item: dict,
    calendar_id: str | None = None,
    tz_name: str | None = None,
) -> CalendarOccurrence | None:
    """
    Convert an events.list item into a CalendarOccurrence.

    Items missing an id or a usable start are dropped (returns None); some
    subscribed calendars routinely produce them.
    """
    event_id = item.get("id")
    start = parse_event_start(item.get("start") or {}, tz_name)
    if not event_id or start is None:
        logger.debug(f"Dropping malformed event from calendar {calendar_id}")
        return None

    return CalendarOccurrence(
        id=event_id,
        summary=item.get("summary") or UNTITLED,
        start=start,
        location=item.get("location") or None,
        html_link=item.get("htmlLink") or None,
        calendar_id=calendar_id,
    )
