"""
Google Calendar access with a user's stored OAuth credentials.

Each CalendarSource wraps one user's tokens. google-auth refreshes the access
token when the stored expiry has passed or the API answers 401; whenever the
token changed during a call, the new tokens are written back to the users
table before the call returns.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable

import httplib2
import sentry_sdk
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build, Resource
from googleapiclient.errors import HttpError

from ..config import get_google_client_id, get_google_client_secret, get_http_timeout
from ..database import get_transaction
from ..queries.users import update_user_tokens
from .occurrences import CalendarOccurrence, parse_occurrence

logger = logging.getLogger(__name__)


GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
EVENTS_PAGE_SIZE = 250


class CalendarError(Exception):
    """Base class for calendar source failures."""


class AuthError(CalendarError):
    """Stored credentials are invalid or revoked; the user must re-authorize."""


class SourceFetchError(CalendarError):
    """A calendar request failed (network, timeout, or non-auth API error)."""


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if exception is a Google API rate limit error."""
    if isinstance(exception, HttpError):
        return exception.resp.status == 429
    return False


def _log_calendar_error(
    exception: Exception,
    operation: str,
    context: dict | None = None,
) -> None:
    """
    Log calendar API errors with appropriate severity.

    Rate limits get warning level + specific Sentry event.
    Other errors get error level.
    """
    context = context or {}

    if _is_rate_limit_error(exception):
        logger.warning(
            f"Google Calendar rate limit hit during {operation}",
            extra={"operation": operation, **context},
        )
        sentry_sdk.capture_message(
            f"Google Calendar rate limit: {operation}",
            level="warning",
            extras={"operation": operation, **context},
        )
    else:
        logger.error(
            f"Google Calendar API error during {operation}: {exception}",
            extra={"operation": operation, **context},
        )
        sentry_sdk.capture_exception(exception)


def _to_google_expiry(value: datetime | None) -> datetime | None:
    """google-auth compares expiry against naive UTC datetimes."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def build_credentials(user: dict) -> Credentials:
    """
    Build google-auth credentials from a users row.

    A NULL token_expiry leaves expiry unknown: the access token is used as-is
    and refreshed only if the API rejects it.
    """
    return Credentials(
        token=user["access_token"],
        refresh_token=user.get("refresh_token"),
        token_uri=GOOGLE_TOKEN_URI,
        client_id=get_google_client_id(),
        client_secret=get_google_client_secret(),
        expiry=_to_google_expiry(user.get("token_expiry")),
    )


class CalendarSource:
    """Authenticated calendar access for one user."""

    def __init__(self, user: dict):
        self.user_id: int = user["user_id"]
        self.email: str = user.get("email") or ""
        self.credentials = build_credentials(user)
        # Last access token known to be in the users table
        self._persisted_token: str | None = self.credentials.token
        self._service: Resource | None = None

    def _get_service(self) -> Resource:
        if self._service is None:
            http = AuthorizedHttp(
                self.credentials,
                http=httplib2.Http(timeout=get_http_timeout()),
            )
            self._service = build("calendar", "v3", http=http, cache_discovery=False)
        return self._service

    async def _persist_refreshed_tokens(self) -> None:
        """
        Write tokens back if they changed since the last successful write.

        A failed write is logged and reported, not raised, and is retried
        after the next request.
        """
        if self.credentials.token == self._persisted_token:
            return

        try:
            async with get_transaction() as conn:
                await update_user_tokens(
                    conn,
                    self.user_id,
                    access_token=self.credentials.token,
                    refresh_token=self.credentials.refresh_token,
                    token_expiry=self.credentials.expiry,
                )
        except Exception as e:
            logger.error(f"[{self.email}] Failed to store refreshed tokens: {e}")
            sentry_sdk.capture_exception(e)
            return

        self._persisted_token = self.credentials.token
        logger.info(f"[{self.email}] Tokens refreshed")

    async def _execute(
        self,
        make_request: Callable[[Resource], Any],
        operation: str,
        context: dict | None = None,
    ) -> dict:
        """
        Run one API request in a worker thread.

        Raises:
            AuthError: refresh failed, or the API still answers 401 after refresh
            SourceFetchError: any other API, network or timeout failure
        """

        def _sync_call():
            return make_request(self._get_service()).execute()

        try:
            return await asyncio.to_thread(_sync_call)
        except RefreshError as e:
            raise AuthError(f"Token refresh rejected during {operation}: {e}") from e
        except HttpError as e:
            if e.resp.status == 401:
                raise AuthError(f"Unauthorized during {operation}") from e
            _log_calendar_error(e, operation, context)
            raise SourceFetchError(f"{operation} failed: HTTP {e.resp.status}") from e
        except (TransportError, httplib2.HttpLib2Error, OSError) as e:
            raise SourceFetchError(f"{operation} failed: {e}") from e
        finally:
            await self._persist_refreshed_tokens()

    async def list_calendars(self) -> list[str]:
        """
        List every calendar id visible to the account, subscribed iCal
        calendars included. Order follows the provider's listing.
        """
        calendar_ids: list[str] = []
        page_token = None

        while True:
            response = await self._execute(
                lambda service, token=page_token: service.calendarList().list(
                    pageToken=token
                ),
                operation="list_calendars",
                context={"user_id": self.user_id},
            )
            for item in response.get("items", []):
                calendar_id = item.get("id")
                if calendar_id and calendar_id not in calendar_ids:
                    calendar_ids.append(calendar_id)

            page_token = response.get("nextPageToken")
            if not page_token:
                return calendar_ids

    async def list_occurrences(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> list[CalendarOccurrence]:
        """
        List event occurrences overlapping [time_min, time_max).

        Recurring events are expanded by the provider (singleEvents=True).
        Result is ordered by start time.
        """
        occurrences: list[CalendarOccurrence] = []
        page_token = None

        while True:
            response = await self._execute(
                lambda service, token=page_token: service.events().list(
                    calendarId=calendar_id,
                    timeMin=_rfc3339(time_min),
                    timeMax=_rfc3339(time_max),
                    singleEvents=True,
                    orderBy="startTime",
                    maxResults=EVENTS_PAGE_SIZE,
                    pageToken=token,
                ),
                operation="list_occurrences",
                context={"user_id": self.user_id, "calendar_id": calendar_id},
            )
            for item in response.get("items", []):
                occurrence = parse_occurrence(item, calendar_id=calendar_id)
                if occurrence is not None:
                    occurrences.append(occurrence)

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        occurrences.sort(key=lambda o: o.start)
        return occurrences
