from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from tenacity import wait_none

from adhub.config import Settings
from adhub.models import User
from adhub.services.errors import CalendarNotConnectedError
from adhub.services.google_calendar import (
    CalendarApiError,
    CalendarClientFactory,
    CalendarCredentials,
    GoogleCalendarClient,
)

EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"
TOKEN_URL = "https://oauth2.googleapis.com/token"


def make_settings() -> Settings:
    return Settings(google_client_id="client-id", google_client_secret="client-secret")


class Recorder:
    """MockTransport handler that replays queued responses and keeps the requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(recorder, access_token="stored-token", expires_at=None, refresh_token="refresh-token", on_refresh=None):
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    credentials = CalendarCredentials(
        refresh_token=refresh_token,
        access_token=access_token,
        expires_at=expires_at,
    )
    return GoogleCalendarClient(http, credentials, settings=make_settings(), on_token_refresh=on_refresh)


def token_response(access_token="fresh-token", expires_in=3600):
    return httpx.Response(200, json={"access_token": access_token, "expires_in": expires_in})


@pytest.mark.asyncio
class TestGoogleCalendarClient:
    async def test_insert_sends_bearer_token(self):
        recorder = Recorder(httpx.Response(200, json={"id": "evt-1", "htmlLink": "https://calendar.google.com/e"}))
        client = make_client(recorder)

        data = await client.insert_event({"summary": "Varsity Football @ Oakwood"})

        assert data["id"] == "evt-1"
        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == EVENTS_URL
        assert request.headers["Authorization"] == "Bearer stored-token"

    async def test_update_and_delete_target_event(self):
        recorder = Recorder(
            httpx.Response(200, json={"id": "evt-1"}),
            httpx.Response(204),
        )
        client = make_client(recorder)

        await client.update_event("evt-1", {"summary": "x"})
        assert await client.delete_event("evt-1") is None

        assert [(r.method, str(r.url)) for r in recorder.requests] == [
            ("PUT", f"{EVENTS_URL}/evt-1"),
            ("DELETE", f"{EVENTS_URL}/evt-1"),
        ]

    async def test_missing_access_token_triggers_refresh(self):
        on_refresh = AsyncMock()
        recorder = Recorder(token_response(), httpx.Response(200, json={"id": "evt-1"}))
        client = make_client(recorder, access_token=None, on_refresh=on_refresh)

        await client.insert_event({})

        token_request, event_request = recorder.requests
        assert str(token_request.url) == TOKEN_URL
        assert b"grant_type=refresh_token" in token_request.content
        assert b"refresh_token=refresh-token" in token_request.content
        assert event_request.headers["Authorization"] == "Bearer fresh-token"

        on_refresh.assert_awaited_once()
        access_token, expires_at = on_refresh.await_args.args
        assert access_token == "fresh-token"
        assert expires_at > datetime.now(timezone.utc) + timedelta(minutes=50)
        assert client.credentials.access_token == "fresh-token"

    async def test_expired_token_refreshed_before_call(self):
        recorder = Recorder(token_response(), httpx.Response(200, json={"id": "evt-1"}))
        # naive expiry is read as UTC
        client = make_client(recorder, expires_at=datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=5))

        await client.insert_event({})

        assert str(recorder.requests[0].url) == TOKEN_URL
        assert recorder.requests[1].headers["Authorization"] == "Bearer fresh-token"

    async def test_valid_token_not_refreshed(self):
        recorder = Recorder(httpx.Response(200, json={"id": "evt-1"}))
        client = make_client(recorder, expires_at=datetime.now(timezone.utc) + timedelta(hours=1))

        await client.insert_event({})
        assert len(recorder.requests) == 1

    async def test_unauthorized_refreshes_once_and_retries(self):
        recorder = Recorder(
            httpx.Response(401, json={"error": {"message": "Invalid Credentials"}}),
            token_response(),
            httpx.Response(200, json={"id": "evt-1"}),
        )
        client = make_client(recorder)

        data = await client.insert_event({})

        assert data == {"id": "evt-1"}
        assert [r.headers.get("Authorization") for r in recorder.requests if str(r.url) == EVENTS_URL] == [
            "Bearer stored-token",
            "Bearer fresh-token",
        ]

    async def test_error_response_raises_calendar_api_error(self):
        recorder = Recorder(httpx.Response(404, json={"error": {"code": 404, "message": "Not Found"}}))
        client = make_client(recorder)

        with pytest.raises(CalendarApiError) as exc_info:
            await client.delete_event("evt-missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Not Found"

    async def test_failed_refresh_raises(self):
        recorder = Recorder(httpx.Response(400, json={"error": "invalid_grant", "error_description": "Token has been revoked."}))
        client = make_client(recorder, access_token=None)

        with pytest.raises(CalendarApiError) as exc_info:
            await client.insert_event({})

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Token has been revoked."

    async def test_transport_error_wrapped(self):
        recorder = Recorder(httpx.ReadTimeout("timed out"))
        client = make_client(recorder)

        with pytest.raises(CalendarApiError) as exc_info:
            await client.insert_event({})
        assert exc_info.value.status_code is None

    async def test_token_request_retried_on_connect_timeout(self):
        recorder = Recorder(httpx.ConnectTimeout("timeout"), token_response(), httpx.Response(200, json={"id": "evt-1"}))
        client = make_client(recorder, access_token=None)

        with patch.object(GoogleCalendarClient._post_token_request.retry, "wait", wait_none()):
            await client.insert_event({})

        assert [str(r.url) for r in recorder.requests] == [TOKEN_URL, TOKEN_URL, EVENTS_URL]


@pytest.mark.asyncio
class TestCalendarClientFactory:
    async def test_user_without_tokens_not_connected(self):
        factory = CalendarClientFactory(settings=make_settings(), http=httpx.AsyncClient())
        user = User(id=1, email="a@b.c", organization_id=1)

        with pytest.raises(CalendarNotConnectedError):
            factory.for_user(user)
        await factory.aclose()

    async def test_refreshed_token_written_back_to_user(self):
        recorder = Recorder(token_response("rotated"), httpx.Response(200, json={"id": "evt-1"}))
        factory = CalendarClientFactory(
            settings=make_settings(),
            http=httpx.AsyncClient(transport=httpx.MockTransport(recorder)),
        )
        user = User(id=1, email="a@b.c", organization_id=1, google_calendar_refresh_token="refresh-token")

        client = factory.for_user(user)
        await client.insert_event({})

        assert user.google_calendar_access_token == "rotated"
        assert user.calendar_token_expiry is not None
        await factory.aclose()
