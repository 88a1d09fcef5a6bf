"""Root pytest configuration for the calendar reminder worker."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Local overrides first; .env only fills what is still unset
_project_root = Path(__file__).parent
load_dotenv(_project_root / ".env.local")
load_dotenv(_project_root / ".env")

# Tests never talk to Google or a real database
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.pop("SENTRY_DSN", None)


@pytest.fixture(scope="session")
def event_loop_policy():
    """One default asyncio policy for every async test and fixture."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()
