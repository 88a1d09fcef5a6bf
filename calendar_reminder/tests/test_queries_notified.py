"""Tests for the notification dedup ledger."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select


NOW = datetime(2024, 1, 10, 15, 0, tzinfo=timezone.utc)
START = int(NOW.timestamp()) + 7 * 60


async def _count_rows(engine) -> int:
    from calendar_reminder.tables import notified

    async with engine.connect() as conn:
        result = await conn.execute(select(func.count()).select_from(notified))
        return result.scalar_one()


class TestMarkNotified:
    @pytest.mark.asyncio
    async def test_first_insert_records_occurrence(self, db_engine, create_user):
        from calendar_reminder.queries.notified import mark_notified, was_notified

        user = await create_user()

        async with db_engine.begin() as conn:
            assert await was_notified(conn, user["user_id"], "evt-1", START) is False
            assert await mark_notified(conn, user["user_id"], "evt-1", START) is True
            assert await was_notified(conn, user["user_id"], "evt-1", START) is True

    @pytest.mark.asyncio
    async def test_duplicate_insert_is_ignored(self, db_engine, create_user):
        from calendar_reminder.queries.notified import mark_notified

        user = await create_user()

        async with db_engine.begin() as conn:
            await mark_notified(conn, user["user_id"], "evt-1", START)
        async with db_engine.begin() as conn:
            inserted = await mark_notified(conn, user["user_id"], "evt-1", START)

        assert inserted is False
        assert await _count_rows(db_engine) == 1

    @pytest.mark.asyncio
    async def test_same_event_other_start_is_distinct(self, db_engine, create_user):
        """Each occurrence of a recurring event is its own key."""
        from calendar_reminder.queries.notified import mark_notified, was_notified

        user = await create_user()

        async with db_engine.begin() as conn:
            await mark_notified(conn, user["user_id"], "weekly", START)
            assert await was_notified(conn, user["user_id"], "weekly", START + 7 * 86400) is False
            assert await mark_notified(conn, user["user_id"], "weekly", START + 7 * 86400) is True

    @pytest.mark.asyncio
    async def test_keys_are_per_user(self, db_engine, create_user):
        from calendar_reminder.queries.notified import mark_notified, was_notified

        alice = await create_user()
        bob = await create_user()

        async with db_engine.begin() as conn:
            await mark_notified(conn, alice["user_id"], "shared", START)
            assert await was_notified(conn, bob["user_id"], "shared", START) is False


class TestPruneNotified:
    @pytest.mark.asyncio
    async def test_removes_records_older_than_a_day(self, db_engine, create_user):
        from calendar_reminder.queries.notified import (
            mark_notified,
            prune_notified,
            was_notified,
        )

        user = await create_user()
        old_start = int((NOW - timedelta(hours=25)).timestamp())
        recent_start = int((NOW - timedelta(hours=2)).timestamp())

        async with db_engine.begin() as conn:
            await mark_notified(conn, user["user_id"], "old", old_start)
            await mark_notified(conn, user["user_id"], "recent", recent_start)

        async with db_engine.begin() as conn:
            deleted = await prune_notified(conn, now=NOW)

        assert deleted == 1
        async with db_engine.connect() as conn:
            assert await was_notified(conn, user["user_id"], "old", old_start) is False
            assert await was_notified(conn, user["user_id"], "recent", recent_start) is True

    @pytest.mark.asyncio
    async def test_record_exactly_at_cutoff_is_kept(self, db_engine, create_user):
        from calendar_reminder.queries.notified import mark_notified, prune_notified

        user = await create_user()
        cutoff = int((NOW - timedelta(hours=24)).timestamp())

        async with db_engine.begin() as conn:
            await mark_notified(conn, user["user_id"], "edge", cutoff)
            deleted = await prune_notified(conn, now=NOW)

        assert deleted == 0
        assert await _count_rows(db_engine) == 1

    @pytest.mark.asyncio
    async def test_empty_ledger(self, db_engine):
        from calendar_reminder.queries.notified import prune_notified

        async with db_engine.begin() as conn:
            assert await prune_notified(conn, now=NOW) == 0
