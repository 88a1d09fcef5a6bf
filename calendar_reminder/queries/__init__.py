"""Database query functions. Each takes an AsyncConnection as first argument."""

from .notified import mark_notified, prune_notified, was_notified
from .users import (
    get_eligible_users,
    get_user_by_id,
    update_user_tokens,
    upsert_user,
)

__all__ = [
    "get_eligible_users",
    "get_user_by_id",
    "update_user_tokens",
    "upsert_user",
    "was_notified",
    "mark_notified",
    "prune_notified",
]
