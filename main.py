"""
Calendar reminder worker entry point.

Architecture:
- One Python process, one asyncio event loop
- APScheduler drives two independent jobs on that loop:
  1. Reminder sweep (every minute, plus once at start-up)
  2. Daily digest sweep (once a day at DAILY_DIGEST_HOUR, DISPLAY_TIMEZONE)

The dashboard/login web app that writes user settings and tokens runs
separately and shares only the database.

Run with: python main.py [--once | --digest] [--init-db]
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")
load_dotenv()

import sentry_sdk

from calendar_reminder.config import check_required_env_vars
from calendar_reminder.database import close_engine, create_tables
from calendar_reminder.notifications.scheduler import (
    init_scheduler,
    run_daily_digest_sweep,
    run_reminder_sweep,
    shutdown_scheduler,
)

logger = logging.getLogger("calendar_reminder.main")


def setup_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # googleapiclient logs every discovery lookup at INFO
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def setup_sentry() -> None:
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("SENTRY_ENVIRONMENT", "production"),
    )
    logger.info("Sentry error reporting enabled")


async def run_worker() -> None:
    """Start the scheduler and run until the process is stopped."""
    init_scheduler()
    try:
        await asyncio.Event().wait()
    finally:
        shutdown_scheduler()
        await close_engine()


async def run_single(job: str) -> None:
    """Run one sweep and exit (manual runs and cron-style deployments)."""
    try:
        if job == "digest":
            stats = await run_daily_digest_sweep()
        else:
            stats = await run_reminder_sweep()
        logger.info(f"Sweep finished: {stats}")
    finally:
        await close_engine()


async def main(args: argparse.Namespace) -> None:
    if args.init_db:
        await create_tables()
        logger.info("Database tables created")

    if args.once:
        await run_single("reminders")
    elif args.digest:
        await run_single("digest")
    else:
        await run_worker()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Calendar Reminder Worker")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        help="Run a single reminder sweep and exit",
    )
    mode.add_argument(
        "--digest",
        action="store_true",
        help="Send the daily digest to all users now and exit",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create missing tables before starting (development only)",
    )
    args = parser.parse_args()

    setup_logging()

    ok, warnings = check_required_env_vars()
    for warning in warnings:
        print(warning)
    if not ok:
        sys.exit(1)

    setup_sentry()

    try:
        asyncio.run(main(args))
    except KeyboardInterrupt:
        pass
