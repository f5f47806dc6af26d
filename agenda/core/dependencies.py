"""FastAPI dependencies wiring the scheduling pipeline."""

from __future__ import annotations

from functools import lru_cache, partial

from fastapi import Request

from agenda.core.config import get_settings
from agenda.domains.auth.credentials import SessionCredentialProvider
from agenda.domains.calendars.providers.google import GoogleCalendarProvider
from agenda.domains.llm.backend import LangChainCompletionBackend
from agenda.domains.scheduling.conversation import ConversationHandler
from agenda.domains.scheduling.event_resolver import EventResolver
from agenda.domains.scheduling.event_submitter import EventSubmitter
from agenda.domains.scheduling.intent_classifier import IntentClassifier
from agenda.domains.scheduling.time_resolver import resolve_time


@lru_cache
def get_conversation_handler() -> ConversationHandler:
    """Build the process-wide conversation handler from settings."""
    settings = get_settings()
    backend = LangChainCompletionBackend.from_settings(settings)
    return ConversationHandler(
        classifier=IntentClassifier(backend),
        resolver=EventResolver(
            time_resolver=partial(resolve_time, languages=tuple(settings.interpretation_languages))
        ),
        submitter=EventSubmitter(GoogleCalendarProvider.from_settings(settings)),
        backend=backend,
        timezone=settings.timezone,
    )


def get_credential_provider(request: Request) -> SessionCredentialProvider:
    """Credential provider bound to the caller's session."""
    return SessionCredentialProvider(request.session)
