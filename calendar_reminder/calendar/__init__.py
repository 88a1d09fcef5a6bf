"""Google Calendar polling: per-user credentials, occurrence listing, aggregation."""

from .client import (
    AuthError,
    CalendarError,
    CalendarSource,
    SourceFetchError,
    build_credentials,
)
from .events import aggregate_occurrences
from .occurrences import CalendarOccurrence, parse_occurrence

__all__ = [
    "AuthError",
    "CalendarError",
    "CalendarSource",
    "SourceFetchError",
    "build_credentials",
    "aggregate_occurrences",
    "CalendarOccurrence",
    "parse_occurrence",
]
