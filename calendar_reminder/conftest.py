"""Shared fixtures: an in-memory database standing in for the real store."""

import pytest
import pytest_asyncio
from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool


@pytest.fixture(autouse=True)
def display_timezone(monkeypatch):
    """Pin settings that tests assert against."""
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Asia/Seoul")
    monkeypatch.setenv("REMINDER_MINUTES", "10")


@pytest_asyncio.fixture
async def db_engine(monkeypatch):
    """
    Fresh in-memory SQLite database installed as the module engine.

    StaticPool keeps one connection so every get_connection() call sees the
    same in-memory database.
    """
    import calendar_reminder.database as database
    from calendar_reminder.tables import metadata

    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    monkeypatch.setattr(database, "_engine", engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def create_user(db_engine):
    """Factory inserting a user row; keyword overrides set settings columns."""
    from calendar_reminder.queries.users import get_user_by_id, upsert_user
    from calendar_reminder.tables import users

    counter = {"n": 0}

    async def _create(**overrides) -> dict:
        counter["n"] += 1
        n = counter["n"]
        settings = {
            "discord_webhook_url": f"https://discord.test/api/webhooks/{n}/token",
            "reminder_minutes": 10,
            "enabled": True,
        }
        settings.update(
            {k: overrides.pop(k) for k in list(overrides) if k in settings}
        )

        async with db_engine.begin() as conn:
            user = await upsert_user(
                conn,
                google_id=overrides.pop("google_id", f"google-{n}"),
                email=overrides.pop("email", f"user{n}@example.com"),
                access_token=overrides.pop("access_token", f"access-{n}"),
                refresh_token=overrides.pop("refresh_token", f"refresh-{n}"),
                token_expiry=overrides.pop("token_expiry", None),
            )
            await conn.execute(
                update(users)
                .where(users.c.user_id == user["user_id"])
                .values(**settings)
            )
            return await get_user_by_id(conn, user["user_id"])

    return _create
