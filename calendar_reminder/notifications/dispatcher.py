"""
Notification dispatcher - formats a message and delivers it to a user's webhook.

Neither path raises on delivery failure; callers get a bool.
"""

import logging
from datetime import datetime

from ..calendar.occurrences import CalendarOccurrence
from .channels.webhook import post_webhook
from .messages import build_digest_message, build_reminder_message

logger = logging.getLogger(__name__)


async def send_event_reminder(
    webhook_url: str,
    occurrence: CalendarOccurrence,
    minutes_until: float,
) -> bool:
    """
    Send a reminder for one upcoming occurrence.

    Returns:
        True if the webhook accepted the message
    """
    payload = build_reminder_message(occurrence, minutes_until)
    success = await post_webhook(webhook_url, payload)
    if not success:
        logger.warning(f"Reminder for event {occurrence.id} was not delivered")
    return success


async def send_daily_digest(
    webhook_url: str,
    occurrences: list[CalendarOccurrence],
    user_email: str,
    now: datetime | None = None,
) -> bool:
    """
    Send the daily digest listing the day's occurrences.

    Returns:
        True if the webhook accepted the message
    """
    payload = build_digest_message(occurrences, footer=user_email, now=now)
    success = await post_webhook(webhook_url, payload)
    if not success:
        logger.warning(f"[{user_email}] Daily digest was not delivered")
    return success
