"""Dedup ledger queries: which occurrences a user was already notified about."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..database import dialect_insert
from ..tables import notified


RETENTION = timedelta(hours=24)


async def was_notified(
    conn: AsyncConnection,
    user_id: int,
    event_id: str,
    event_start: int,
) -> bool:
    """Check whether this (user, event, start) occurrence was already delivered."""
    result = await conn.execute(
        select(notified.c.notified_id)
        .where(
            and_(
                notified.c.user_id == user_id,
                notified.c.event_id == event_id,
                notified.c.event_start == event_start,
            )
        )
        .limit(1)
    )
    return result.first() is not None


async def mark_notified(
    conn: AsyncConnection,
    user_id: int,
    event_id: str,
    event_start: int,
) -> bool:
    """
    Record a delivered occurrence.

    Atomic insert-if-absent backed by the unique constraint, so concurrent
    inserts of the same key are safe. Returns True if a row was inserted.
    """
    stmt = (
        dialect_insert(conn, notified)
        .values(user_id=user_id, event_id=event_id, event_start=event_start)
        .on_conflict_do_nothing(
            index_elements=[
                notified.c.user_id,
                notified.c.event_id,
                notified.c.event_start,
            ]
        )
    )
    result = await conn.execute(stmt)
    return result.rowcount > 0


async def prune_notified(
    conn: AsyncConnection,
    now: datetime | None = None,
) -> int:
    """Delete records whose occurrence started more than 24h ago. Returns count deleted."""
    now = now or datetime.now(timezone.utc)
    cutoff = int((now - RETENTION).timestamp())
    result = await conn.execute(delete(notified).where(notified.c.event_start < cutoff))
    return result.rowcount
