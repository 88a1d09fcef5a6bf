"""Tests for environment-driven configuration."""

from unittest.mock import patch

from calendar_reminder.config import (
    DEFAULT_DATABASE_URL,
    check_required_env_vars,
    get_callback_url,
    get_database_url,
    get_default_reminder_minutes,
    is_daily_digest_enabled,
)


class TestGetters:
    def test_database_url_defaults_to_sqlite_file(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert get_database_url() == DEFAULT_DATABASE_URL

    def test_database_url_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/cal")
        assert get_database_url() == "postgresql://u:p@db/cal"

    def test_callback_url_includes_base_path(self, monkeypatch):
        monkeypatch.setenv("BASE_URL", "https://example.com/")
        monkeypatch.setenv("BASE_PATH", "/calendar")
        assert get_callback_url() == "https://example.com/calendar/auth/callback"

    def test_reminder_minutes_default(self, monkeypatch):
        monkeypatch.delenv("REMINDER_MINUTES", raising=False)
        assert get_default_reminder_minutes() == 10

    def test_digest_can_be_disabled(self, monkeypatch):
        monkeypatch.setenv("DAILY_DIGEST_ENABLED", "false")
        assert is_daily_digest_enabled() is False


class TestCheckRequiredEnvVars:
    def test_missing_oauth_client_fails(self):
        with patch.dict("os.environ", {}, clear=True):
            ok, warnings = check_required_env_vars()

        assert ok is False

    def test_optional_vars_only_warn(self):
        env = {"GOOGLE_CLIENT_ID": "id", "GOOGLE_CLIENT_SECRET": "secret"}
        with patch.dict("os.environ", env, clear=True):
            ok, warnings = check_required_env_vars()

        assert ok is True
        assert any("SENTRY_DSN" in w for w in warnings)
        assert any("DATABASE_URL" in w for w in warnings)
