"""
Reminder and digest notifications delivered to user webhooks.

Public API:
    init_scheduler() / shutdown_scheduler() - Start/stop the periodic sweeps
    run_reminder_sweep() - One reminder pass over all eligible users
    run_daily_digest_sweep() - One digest pass over all eligible users
    process_user_reminders(user) - Reminder pass for a single user
    send_event_reminder(...) / send_daily_digest(...) - Deliver one message
"""

from .dispatcher import send_daily_digest, send_event_reminder
from .reminders import process_user_reminders, select_due_occurrences
from .scheduler import (
    init_scheduler,
    run_daily_digest_sweep,
    run_reminder_sweep,
    shutdown_scheduler,
)

__all__ = [
    "init_scheduler",
    "shutdown_scheduler",
    "run_reminder_sweep",
    "run_daily_digest_sweep",
    "process_user_reminders",
    "select_due_occurrences",
    "send_event_reminder",
    "send_daily_digest",
]
