import httpx
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from adhub.config import Settings, get_settings
from adhub.models import User
from adhub.services.errors import CalendarNotConnectedError
from adhub.utils.timestamps import utcnow

logger = logging.getLogger(__name__)

# Exceptions to retry on
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
)

# Refresh a little before Google's expiry to avoid racing it
EXPIRY_SKEW = timedelta(seconds=60)

TokenRefreshCallback = Callable[[str, datetime], Awaitable[None]]


class CalendarApiError(Exception):
    """Google rejected a call or could not be reached. status_code is None for transport errors."""

    def __init__(self, status_code: int | None, message: str):
        super().__init__(f"Google Calendar API error ({status_code}): {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class CalendarCredentials:
    refresh_token: str | None
    access_token: str | None = None
    expires_at: datetime | None = None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return error.get("message") or response.reason_phrase
    if isinstance(error, str):
        return payload.get("error_description") or error
    return response.reason_phrase


class GoogleCalendarClient:
    """Calendar v3 events client for one user's calendar."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        credentials: CalendarCredentials,
        settings: Settings | None = None,
        on_token_refresh: TokenRefreshCallback | None = None,
    ):
        self.http = http
        self.credentials = credentials
        self.settings = settings or get_settings()
        self.on_token_refresh = on_token_refresh

    @property
    def events_url(self) -> str:
        return f"{self.settings.google_calendar_base_url}/calendars/{self.settings.google_calendar_id}/events"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _post_token_request(self) -> httpx.Response:
        """
        Exchange the stored refresh token for a new access token.

        Retries up to 3 times with exponential backoff on connection
        timeouts, read timeouts, and connection errors.
        """
        return await self.http.post(
            self.settings.google_token_url,
            data={
                "client_id": self.settings.google_client_id,
                "client_secret": self.settings.google_client_secret,
                "refresh_token": self.credentials.refresh_token,
                "grant_type": "refresh_token",
            },
            timeout=self.settings.google_timeout_seconds,
        )

    async def refresh_access_token(self) -> str:
        if not self.credentials.refresh_token:
            raise CalendarApiError(401, "No refresh token available")

        try:
            response = await self._post_token_request()
        except httpx.HTTPError as e:
            raise CalendarApiError(None, str(e)) from e

        if response.status_code >= 400:
            raise CalendarApiError(response.status_code, _error_message(response))

        data = response.json()
        access_token = data["access_token"]
        expires_at = utcnow() + timedelta(seconds=int(data.get("expires_in", 3600)))
        self.credentials.access_token = access_token
        self.credentials.expires_at = expires_at
        logger.info("Refreshed Google Calendar access token")

        if self.on_token_refresh is not None:
            await self.on_token_refresh(access_token, expires_at)
        return access_token

    async def ensure_access_token(self) -> str:
        """Return a usable access token, refreshing when missing or about to expire."""
        token = self.credentials.access_token
        expires_at = self.credentials.expires_at
        if not token:
            return await self.refresh_access_token()
        if expires_at is not None and expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at is not None and self.credentials.refresh_token and utcnow() + EXPIRY_SKEW >= expires_at:
            return await self.refresh_access_token()
        return token

    async def _request(self, method: str, url: str, json: dict | None = None) -> httpx.Response:
        token = await self.ensure_access_token()
        response = await self._send(method, url, token, json)

        # Stored token revoked or expired early; one refresh and retry
        if response.status_code == 401 and self.credentials.refresh_token:
            token = await self.refresh_access_token()
            response = await self._send(method, url, token, json)

        if response.status_code >= 400:
            raise CalendarApiError(response.status_code, _error_message(response))
        return response

    async def _send(self, method: str, url: str, token: str, json: dict | None) -> httpx.Response:
        try:
            return await self.http.request(
                method,
                url,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.settings.google_timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise CalendarApiError(None, str(e)) from e

    # ==================== Events ====================

    async def insert_event(self, event: dict[str, Any]) -> dict[str, Any]:
        response = await self._request("POST", self.events_url, json=event)
        return response.json()

    async def update_event(self, event_id: str, event: dict[str, Any]) -> dict[str, Any]:
        response = await self._request("PUT", f"{self.events_url}/{event_id}", json=event)
        return response.json()

    async def delete_event(self, event_id: str) -> None:
        await self._request("DELETE", f"{self.events_url}/{event_id}")


class CalendarClientFactory:
    """
    Builds per-user calendar clients over one shared HTTP connection pool.

    Created once at application startup and kept on ``app.state``.
    """

    def __init__(self, settings: Settings | None = None, http: httpx.AsyncClient | None = None):
        self.settings = settings or get_settings()
        self.http = http or httpx.AsyncClient(
            timeout=self.settings.google_timeout_seconds,
            follow_redirects=True,
        )

    def for_user(self, user: User) -> GoogleCalendarClient:
        if not user.calendar_connected:
            raise CalendarNotConnectedError()

        async def persist_token(access_token: str, expires_at: datetime) -> None:
            # Saved with the caller's next commit
            user.google_calendar_access_token = access_token
            user.calendar_token_expiry = expires_at

        credentials = CalendarCredentials(
            refresh_token=user.google_calendar_refresh_token,
            access_token=user.google_calendar_access_token,
            expires_at=user.calendar_token_expiry,
        )
        return GoogleCalendarClient(
            self.http,
            credentials,
            settings=self.settings,
            on_token_refresh=persist_token,
        )

    async def aclose(self) -> None:
        await self.http.aclose()
