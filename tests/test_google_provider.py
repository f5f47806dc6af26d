"""Tests for the Google Calendar provider using a mocked transport."""

import json

import httpx
import pytest

from agenda.domains.auth.credentials import Credential
from agenda.domains.calendars.providers.google import GoogleCalendarProvider
from agenda.utils.errors import BackendUnavailable, SubmissionRejected

CREDENTIAL = Credential(access_token="ya29.test-access-token")
EVENT = {
    "summary": "Dentist",
    "start": {"dateTime": "2025-12-10T14:00:00-03:00"},
    "end": {"dateTime": "2025-12-10T15:00:00-03:00"},
}


@pytest.mark.asyncio
async def test_create_event_posts_to_calendar():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "abc123", "status": "confirmed"})

    provider = GoogleCalendarProvider(transport=httpx.MockTransport(handler))

    created = await provider.create_event(EVENT, CREDENTIAL)

    assert created["id"] == "abc123"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/calendar/v3/calendars/primary/events"
    assert request.headers["Authorization"] == "Bearer ya29.test-access-token"
    assert json.loads(request.content) == EVENT


@pytest.mark.asyncio
async def test_calendar_id_is_encoded():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "abc123"})

    provider = GoogleCalendarProvider("team@group.calendar.google.com", transport=httpx.MockTransport(handler))

    await provider.create_event(EVENT, CREDENTIAL)

    assert seen[0].url.raw_path.startswith(b"/calendar/v3/calendars/team%40group.calendar.google.com/events")


@pytest.mark.asyncio
async def test_error_status_is_rejection_with_reason():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            403,
            json={"error": {"code": 403, "message": "Insufficient Permission"}},
        )

    provider = GoogleCalendarProvider(transport=httpx.MockTransport(handler))

    with pytest.raises(SubmissionRejected) as excinfo:
        await provider.create_event(EVENT, CREDENTIAL)

    assert excinfo.value.status_code == 403
    assert excinfo.value.reason == "Insufficient Permission"


@pytest.mark.asyncio
async def test_connection_error_is_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = GoogleCalendarProvider(transport=httpx.MockTransport(handler))

    with pytest.raises(BackendUnavailable):
        await provider.create_event(EVENT, CREDENTIAL)


@pytest.mark.asyncio
async def test_non_json_body_is_rejection():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    provider = GoogleCalendarProvider(transport=httpx.MockTransport(handler))

    with pytest.raises(SubmissionRejected):
        await provider.create_event(EVENT, CREDENTIAL)
