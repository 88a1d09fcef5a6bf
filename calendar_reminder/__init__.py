"""
Calendar reminder worker.

Polls each subscriber's Google calendars and posts reminders (and a daily
digest) to their Discord webhook.
"""

# Database (SQLAlchemy)
from .database import (
    close_engine,
    create_tables,
    get_connection,
    get_engine,
    get_transaction,
)

# Timezone utilities
from .timezone import format_datetime_in_timezone, local_day_bounds

__all__ = [
    # Database
    "get_connection",
    "get_transaction",
    "get_engine",
    "close_engine",
    "create_tables",
    # Timezone
    "format_datetime_in_timezone",
    "local_day_bounds",
]
