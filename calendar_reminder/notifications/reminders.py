"""
Reminder evaluation for one user.

Fetches the next hour of occurrences, picks those inside the user's
lead-time window, and notifies each (event id, start) pair once.
"""

import logging
from datetime import datetime, timedelta, timezone

from ..calendar.events import aggregate_occurrences
from ..calendar.occurrences import CalendarOccurrence
from ..config import get_default_reminder_minutes
from ..database import get_connection, get_transaction
from ..queries.notified import mark_notified, was_notified
from .dispatcher import send_event_reminder

logger = logging.getLogger(__name__)


# Lead times above this can never be honoured (settings cap them at 60)
FETCH_WINDOW = timedelta(hours=1)


def get_reminder_minutes(user: dict) -> int:
    """User's lead time in minutes, falling back to the configured default."""
    return user.get("reminder_minutes") or get_default_reminder_minutes()


def minutes_until(occurrence: CalendarOccurrence, now: datetime) -> float:
    return (occurrence.start - now).total_seconds() / 60


def select_due_occurrences(
    occurrences: list[CalendarOccurrence],
    now: datetime,
    reminder_minutes: int,
) -> list[tuple[CalendarOccurrence, float]]:
    """
    Occurrences with 0 < minutes until start <= reminder_minutes.

    Anything already started is skipped; late reminders are never sent.
    """
    due = []
    for occurrence in occurrences:
        remaining = minutes_until(occurrence, now)
        if 0 < remaining <= reminder_minutes:
            due.append((occurrence, remaining))
    return due


async def process_user_reminders(user: dict, now: datetime | None = None) -> int:
    """
    Send every due, not-yet-sent reminder for one user.

    A dedup row is written only after the webhook confirmed delivery, so a
    failed send is retried on the next sweep while still inside the window.

    Returns:
        Number of reminders delivered

    Raises:
        AuthError: the user's calendar credentials were rejected
    """
    now = now or datetime.now(timezone.utc)
    user_id = user["user_id"]
    email = user.get("email", "")

    occurrences = await aggregate_occurrences(user, now, now + FETCH_WINDOW)
    due = select_due_occurrences(occurrences, now, get_reminder_minutes(user))

    sent = 0
    for occurrence, remaining in due:
        event_start = occurrence.start_unix

        async with get_connection() as conn:
            if await was_notified(conn, user_id, occurrence.id, event_start):
                continue

        logger.info(f"[{email}] Sending reminder for: {occurrence.summary}")
        success = await send_event_reminder(
            user["discord_webhook_url"], occurrence, remaining
        )
        if not success:
            continue

        async with get_transaction() as conn:
            await mark_notified(conn, user_id, occurrence.id, event_start)
        sent += 1
        logger.info(f"[{email}] Notification sent successfully")

    return sent
