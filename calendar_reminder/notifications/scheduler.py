"""
APScheduler-based driver for the two periodic sweeps.

- Reminder sweep: every minute, plus once immediately at start-up.
- Daily digest sweep: once a day at DAILY_DIGEST_HOUR in DISPLAY_TIMEZONE.

Each job runs with max_instances=1, so a slow sweep delays the next tick of
the same job instead of overlapping it. The two jobs may overlap each other.
"""

import logging
from datetime import datetime, timezone

import sentry_sdk
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..calendar.client import AuthError
from ..calendar.events import aggregate_occurrences
from ..config import (
    get_daily_digest_hour,
    get_display_timezone,
    is_daily_digest_enabled,
)
from ..database import get_connection, get_transaction
from ..queries.notified import prune_notified
from ..queries.users import get_eligible_users
from ..timezone import local_day_bounds
from .dispatcher import send_daily_digest
from .reminders import process_user_reminders

logger = logging.getLogger(__name__)


_scheduler: AsyncIOScheduler | None = None

REMINDER_JOB_ID = "reminder_sweep"
DIGEST_JOB_ID = "daily_digest_sweep"


# =============================================================================
# Scheduler initialization and shutdown
# =============================================================================


def init_scheduler() -> AsyncIOScheduler:
    """
    Create, configure and start the scheduler.

    Must be called from inside a running event loop.
    """
    global _scheduler

    if _scheduler is not None:
        return _scheduler

    _scheduler = AsyncIOScheduler(
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,
            "misfire_grace_time": 30,
        },
    )

    _scheduler.add_job(
        run_reminder_sweep,
        trigger="cron",
        minute="*",
        id=REMINDER_JOB_ID,
        replace_existing=True,
        next_run_time=datetime.now(timezone.utc),  # immediate first sweep
    )

    if is_daily_digest_enabled():
        _scheduler.add_job(
            run_daily_digest_sweep,
            trigger="cron",
            hour=get_daily_digest_hour(),
            minute=0,
            timezone=get_display_timezone(),
            id=DIGEST_JOB_ID,
            replace_existing=True,
        )

    _scheduler.start()
    logger.info("Worker started - checking calendars every minute")
    if is_daily_digest_enabled():
        logger.info(
            f"Daily digest scheduled at {get_daily_digest_hour():02d}:00 "
            f"{get_display_timezone()}"
        )

    return _scheduler


def shutdown_scheduler() -> None:
    """
    Shutdown the scheduler without waiting for running sweeps.

    In-flight sweeps are abandoned; the dedup ledger makes a rerun safe.
    """
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Scheduler stopped")


# =============================================================================
# Sweeps
# =============================================================================


def _is_eligible(user: dict) -> bool:
    return bool(user.get("enabled")) and bool(user.get("discord_webhook_url"))


async def _load_eligible_users() -> list[dict]:
    async with get_connection() as conn:
        users = await get_eligible_users(conn)
    return [user for user in users if _is_eligible(user)]


async def run_reminder_sweep(now: datetime | None = None) -> dict:
    """
    Check every eligible user for due reminders, then prune the dedup ledger.

    One user's failure never stops the others.

    Returns dict with counts: {"users": N, "sent": N, "failed": N, "pruned": N}
    """
    logger.info("Checking calendars...")

    users = await _load_eligible_users()
    logger.info(f"Found {len(users)} enabled users")

    stats = {"users": len(users), "sent": 0, "failed": 0, "pruned": 0}

    for user in users:
        email = user.get("email", "")
        try:
            stats["sent"] += await process_user_reminders(user, now)
        except AuthError as e:
            logger.warning(f"[{email}] Calendar authorization failed: {e}")
            stats["failed"] += 1
        except Exception as e:
            logger.error(f"[{email}] Error: {e}")
            sentry_sdk.capture_exception(e)
            stats["failed"] += 1

    try:
        async with get_transaction() as conn:
            stats["pruned"] = await prune_notified(conn, now)
    except Exception as e:
        logger.error(f"Failed to prune old notifications: {e}")
        sentry_sdk.capture_exception(e)

    return stats


async def run_daily_digest_sweep(now: datetime | None = None) -> dict:
    """
    Send each eligible user a digest of today's occurrences.

    "Today" is the local calendar day in DISPLAY_TIMEZONE. Digests are not
    deduplicated or retried.

    Returns dict with counts: {"users": N, "sent": N, "failed": N}
    """
    now = now or datetime.now(timezone.utc)
    day_start, day_end = local_day_bounds(now, get_display_timezone())

    logger.info("Sending daily summary...")

    users = await _load_eligible_users()
    logger.info(f"Found {len(users)} enabled users for daily summary")

    stats = {"users": len(users), "sent": 0, "failed": 0}

    for user in users:
        email = user.get("email", "")
        try:
            occurrences = await aggregate_occurrences(user, day_start, day_end)
            success = await send_daily_digest(
                user["discord_webhook_url"], occurrences, email, now
            )
        except AuthError as e:
            logger.warning(f"[{email}] Calendar authorization failed: {e}")
            stats["failed"] += 1
            continue
        except Exception as e:
            logger.error(f"[{email}] Daily summary error: {e}")
            sentry_sdk.capture_exception(e)
            stats["failed"] += 1
            continue

        if success:
            stats["sent"] += 1
            logger.info(f"[{email}] Daily summary sent ({len(occurrences)} events)")
        else:
            stats["failed"] += 1

    return stats
