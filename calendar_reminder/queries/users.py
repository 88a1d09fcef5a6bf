"""User and credential queries using SQLAlchemy Core."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..database import dialect_insert
from ..tables import users


def _as_utc(value: datetime | None) -> datetime | None:
    """Normalize a datetime to aware UTC (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _row_to_user(row) -> dict[str, Any]:
    user = dict(row)
    user["token_expiry"] = _as_utc(user.get("token_expiry"))
    return user


async def get_user_by_id(
    conn: AsyncConnection,
    user_id: int,
) -> dict[str, Any] | None:
    """Get a user with their stored credentials, or None if not found."""
    result = await conn.execute(select(users).where(users.c.user_id == user_id))
    row = result.mappings().first()
    return _row_to_user(row) if row else None


async def get_eligible_users(conn: AsyncConnection) -> list[dict[str, Any]]:
    """
    Get users the worker should process.

    A user is eligible iff enabled and a webhook URL is configured.
    """
    result = await conn.execute(
        select(users)
        .where(users.c.enabled.is_(True))
        .where(users.c.discord_webhook_url.isnot(None))
        .order_by(users.c.user_id)
    )
    return [_row_to_user(row) for row in result.mappings()]


async def update_user_tokens(
    conn: AsyncConnection,
    user_id: int,
    access_token: str,
    refresh_token: str | None = None,
    token_expiry: datetime | None = None,
) -> int:
    """
    Store freshly issued tokens for a user.

    A None refresh_token keeps the stored one: Google does not reissue the
    refresh token on every exchange. Returns the number of rows updated
    (0 for an unknown user_id).
    """
    values: dict[str, Any] = {
        "access_token": access_token,
        "token_expiry": _as_utc(token_expiry),
        "updated_at": func.now(),
    }
    if refresh_token is not None:
        values["refresh_token"] = refresh_token

    result = await conn.execute(
        update(users).where(users.c.user_id == user_id).values(**values)
    )
    return result.rowcount


async def upsert_user(
    conn: AsyncConnection,
    google_id: str,
    email: str,
    access_token: str,
    refresh_token: str | None = None,
    token_expiry: datetime | None = None,
) -> dict[str, Any]:
    """
    Create or update a user from a completed OAuth login.

    Settings columns are left untouched on conflict, and a missing
    refresh_token never overwrites a stored one.
    """
    stmt = dialect_insert(conn, users).values(
        google_id=google_id,
        email=email,
        access_token=access_token,
        refresh_token=refresh_token,
        token_expiry=_as_utc(token_expiry),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[users.c.google_id],
        set_={
            "email": stmt.excluded.email,
            "access_token": stmt.excluded.access_token,
            "refresh_token": func.coalesce(
                stmt.excluded.refresh_token, users.c.refresh_token
            ),
            "token_expiry": stmt.excluded.token_expiry,
            "updated_at": func.now(),
        },
    )
    await conn.execute(stmt)

    result = await conn.execute(select(users).where(users.c.google_id == google_id))
    return _row_to_user(result.mappings().one())
