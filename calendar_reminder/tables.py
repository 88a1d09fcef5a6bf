"""SQLAlchemy Core table definitions for the worker's store."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    func,
)

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. USERS (settings written by the dashboard, tokens by the worker)
# =====================================================
users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("google_id", Text, nullable=False, unique=True),
    Column("email", Text, nullable=False),
    Column("access_token", Text, nullable=False),
    Column("refresh_token", Text),
    Column("token_expiry", DateTime(timezone=True)),  # NULL = unknown
    Column("discord_webhook_url", Text),  # NULL = reminders suppressed
    Column("reminder_minutes", Integer, server_default="10"),
    Column("enabled", Boolean, nullable=False, server_default="1"),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
)


# =====================================================
# 2. NOTIFIED (dedup ledger, one row per delivered occurrence)
# =====================================================
notified = Table(
    "notified",
    metadata,
    Column("notified_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("event_id", Text, nullable=False),
    Column("event_start", Integer, nullable=False),  # unix seconds, floored
    Column("notified_at", DateTime(timezone=True), server_default=func.now()),
    UniqueConstraint(
        "user_id", "event_id", "event_start", name="uq_notified_occurrence"
    ),
    Index("idx_notified_user_event", "user_id", "event_id"),
    Index("idx_notified_event_start", "event_start"),
)
