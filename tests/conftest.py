"""Pytest fixtures for the agenda assistant tests."""

import json
import os
from datetime import datetime, timedelta, timezone

import pytest

# Set required env vars before the app (and its cached settings) is imported
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("UTC_OFFSET", "-03:00")

from fastapi.testclient import TestClient  # noqa: E402

from agenda.core.dependencies import get_conversation_handler  # noqa: E402
from agenda.domains.auth.credentials import Credential  # noqa: E402
from agenda.domains.calendars.providers.base import CalendarProvider  # noqa: E402
from agenda.domains.llm.backend import CompletionBackend  # noqa: E402
from agenda.domains.scheduling.conversation import ConversationHandler  # noqa: E402
from agenda.domains.scheduling.event_resolver import EventResolver  # noqa: E402
from agenda.domains.scheduling.event_submitter import EventSubmitter  # noqa: E402
from agenda.domains.scheduling.intent_classifier import IntentClassifier  # noqa: E402
from agenda.main import app  # noqa: E402
from agenda.utils.errors import BackendUnavailable, Unauthenticated  # noqa: E402

BRT = timezone(timedelta(hours=-3))
REFERENCE = datetime(2025, 11, 1, 10, 30, tzinfo=BRT)


class FakeCompletionBackend(CompletionBackend):
    """Returns scripted completions in order; scripted exceptions are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise BackendUnavailable("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeCalendarProvider(CalendarProvider):
    """Records created events and returns a fresh id for each one."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def create_event(self, event_data, credential):
        self.calls.append((event_data, credential))
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return {"id": f"evt-{len(self.calls)}", "status": "confirmed"}


class FakeCredentials:
    def __init__(self, token="ya29.test-access-token", authenticated=True):
        self.token = token
        self.authenticated = authenticated
        self.calls = 0

    async def get_credential(self) -> Credential:
        self.calls += 1
        if not self.authenticated:
            raise Unauthenticated("User is not authenticated. Sign in with Google.")
        return Credential(access_token=self.token)


class RecordingTimeResolver:
    """Stand-in for the heuristic resolver that returns a fixed answer."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def __call__(self, text, reference):
        self.calls.append((text, reference))
        return self.result


def judgment_json(**fields) -> str:
    """Serialize a judgment the way the model is asked to answer."""
    return json.dumps(fields)


def event_json(
    summary="Doctor appointment",
    when="2025-12-10T15:00:00-03:00",
    *,
    event_type="appointment",
    is_all_day=False,
    duration=60,
) -> str:
    payload = {
        "is_event": True,
        "event_type": event_type,
        "is_all_day": is_all_day,
        "summary": summary,
        "duration": duration,
    }
    if when is not None:
        payload["datetime"] = when
    return json.dumps(payload)


@pytest.fixture
def reference():
    return REFERENCE


@pytest.fixture
def calendar_provider():
    return FakeCalendarProvider()


@pytest.fixture
def credentials():
    return FakeCredentials()


@pytest.fixture
def make_handler(calendar_provider):
    """Factory building a ConversationHandler around fakes."""

    def _make(backend, *, provider=None, time_resolver=None):
        return ConversationHandler(
            classifier=IntentClassifier(backend),
            resolver=EventResolver(time_resolver=time_resolver or RecordingTimeResolver()),
            submitter=EventSubmitter(provider or calendar_provider),
            backend=backend,
            timezone=BRT,
            clock=lambda: REFERENCE,
        )

    return _make


@pytest.fixture
def test_client():
    """Create a FastAPI test client."""
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def override_handler():
    """Install a handler built from fakes as the app's conversation handler."""

    def _override(handler):
        app.dependency_overrides[get_conversation_handler] = lambda: handler
        return handler

    yield _override
    app.dependency_overrides.clear()
