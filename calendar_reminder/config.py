"""
Centralized configuration for the calendar reminder worker.

All settings come from environment variables (loaded from .env files by
main.py). Getters are read on every call so tests can patch os.environ.
"""

import os


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/calendar-reminder.db"


def get_database_url() -> str:
    """Get the configured database URL (SQLite file by default)."""
    return os.environ.get("DATABASE_URL") or DEFAULT_DATABASE_URL


def get_google_client_id() -> str:
    return os.environ.get("GOOGLE_CLIENT_ID", "")


def get_google_client_secret() -> str:
    return os.environ.get("GOOGLE_CLIENT_SECRET", "")


def get_base_url() -> str:
    return os.environ.get("BASE_URL", "http://localhost:3000").rstrip("/")


def get_callback_url() -> str:
    """
    OAuth redirect URI registered for the login flow.

    The worker never calls this; the separate login service that writes
    users rows reads it from the same environment.
    """
    base_path = os.environ.get("BASE_PATH", "")
    return f"{get_base_url()}{base_path}/auth/callback"


def get_default_reminder_minutes() -> int:
    """Lead time used when a user row has no explicit value."""
    return int(os.getenv("REMINDER_MINUTES", "10"))


def get_display_timezone() -> str:
    """Timezone used for message timestamps and digest day boundaries."""
    return os.getenv("DISPLAY_TIMEZONE", "Asia/Seoul")


def get_daily_digest_hour() -> int:
    return int(os.getenv("DAILY_DIGEST_HOUR", "9"))


def is_daily_digest_enabled() -> bool:
    return os.getenv("DAILY_DIGEST_ENABLED", "true").lower() in ("true", "1", "yes")


def get_http_timeout() -> float:
    """Timeout in seconds applied to every outbound network call."""
    return float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))


def is_sql_echo() -> bool:
    return os.environ.get("SQL_ECHO", "").lower() == "true"


# Format: (name, description, required)
REQUIRED_ENV_VARS = [
    ("GOOGLE_CLIENT_ID", "Google OAuth client ID (token refresh)", True),
    ("GOOGLE_CLIENT_SECRET", "Google OAuth client secret (token refresh)", True),
    ("DATABASE_URL", "Database connection string", False),
    ("SENTRY_DSN", "Sentry DSN for error reporting", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []

    for name, description, required in REQUIRED_ENV_VARS:
        if os.environ.get(name):
            continue
        if required:
            errors.append(f"  ✗ {name}: Not set ({description})")
        else:
            warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings
