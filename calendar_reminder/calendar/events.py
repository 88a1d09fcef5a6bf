"""Aggregate one user's occurrences across all of their calendars."""

import logging
from datetime import datetime

import sentry_sdk

from .client import CalendarError, CalendarSource, SourceFetchError
from .occurrences import CalendarOccurrence

logger = logging.getLogger(__name__)


async def aggregate_occurrences(
    user: dict,
    time_min: datetime,
    time_max: datetime,
    source: CalendarSource | None = None,
) -> list[CalendarOccurrence]:
    """
    Fetch and merge occurrences from every calendar visible to the user.

    The calendar list is fetched once. A failing calendar contributes no
    occurrences and does not stop the others. Identical events on two
    calendars are kept as two occurrences.

    Returns:
        Occurrences sorted by start (stable: ties keep fetch order); empty
        if the user has no calendars or every fetch failed.

    Raises:
        AuthError: the user's credentials were rejected while listing calendars
    """
    source = source or CalendarSource(user)
    email = user.get("email", "")

    try:
        calendar_ids = await source.list_calendars()
    except SourceFetchError as e:
        logger.warning(f"[{email}] Failed to list calendars: {e}")
        return []

    occurrences: list[CalendarOccurrence] = []
    for calendar_id in calendar_ids:
        try:
            occurrences.extend(
                await source.list_occurrences(calendar_id, time_min, time_max)
            )
        except CalendarError as e:
            logger.warning(
                f"[{email}] Failed to fetch events from calendar {calendar_id}: {e}"
            )
        except Exception as e:
            logger.error(
                f"[{email}] Unexpected error fetching calendar {calendar_id}: {e}"
            )
            sentry_sdk.capture_exception(e)

    occurrences.sort(key=lambda o: o.start)
    return occurrences
