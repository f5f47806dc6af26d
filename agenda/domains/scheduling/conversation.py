"""Top-level conversation handling.

One message in, one reply out. The structured pipeline is a small LangGraph
graph (classify intent, then create an event or reply conversationally). It is
the first entry of an ordered list of fallback strategies; a plain completion
is the second, and a static apology closes the list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Awaitable, Callable, List, Literal, Optional

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from agenda.domains.auth.credentials import CredentialProvider
from agenda.domains.llm.backend import CompletionBackend
from agenda.domains.scheduling import prompts
from agenda.domains.scheduling.event_resolver import EventResolver
from agenda.domains.scheduling.event_submitter import EventSubmitter
from agenda.domains.scheduling.intent_classifier import IntentClassifier
from agenda.domains.scheduling.schemas import IntentJudgment, SubmissionOutcome
from agenda.utils.errors import AmbiguousTiming, EmptyInput, Unauthenticated

logger = logging.getLogger(__name__)

EMPTY_INPUT_REPLY = "⚠️ Empty message. Tell me what you would like to schedule."
AMBIGUOUS_TIMING_REPLY = "⚠️ I couldn't understand the date and time. Please be more specific."
CONNECT_CALENDAR_REPLY = (
    "🔐 Please connect your Google Calendar so I can schedule events for you."
)
FALLBACK_REPLY = "⚠️ An error occurred while processing your message. Please try again."


class PipelineState(TypedDict, total=False):
    text: str
    reference: datetime
    credentials: CredentialProvider
    judgment: IntentJudgment
    outcome: SubmissionOutcome
    reply: str


Strategy = Callable[[str, CredentialProvider, datetime], Awaitable[str]]


@dataclass(frozen=True)
class FallbackStrategy:
    """One attempt at producing a reply; failures move on to the next one."""

    name: str
    run: Strategy


def ensure_message(text: Optional[str]) -> str:
    """Return the stripped message, raising EmptyInput when nothing is left."""
    if text is None or not text.strip():
        raise EmptyInput("Message text cannot be empty.")
    return text.strip()


def route_judgment(state: PipelineState) -> Literal["create-event", "no-action"]:
    """Route to the event branch or the conversational branch."""
    return "create-event" if state["judgment"].is_event else "no-action"


class ConversationHandler:
    """Answers one chat message, creating a calendar event when asked to."""

    def __init__(
        self,
        *,
        classifier: IntentClassifier,
        resolver: EventResolver,
        submitter: EventSubmitter,
        backend: CompletionBackend,
        timezone: tzinfo,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._classifier = classifier
        self._resolver = resolver
        self._submitter = submitter
        self._backend = backend
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(self._timezone))
        self._graph = self._build_graph()
        self.strategies: List[FallbackStrategy] = [
            FallbackStrategy("structured-pipeline", self._run_pipeline),
            FallbackStrategy("plain-completion", self._plain_reply),
        ]

    def _build_graph(self):
        builder = StateGraph(PipelineState)
        builder.add_node("classify_intent", self._classify_intent)
        builder.add_node("create-event", self._create_event)
        builder.add_node("no-action", self._reply_conversationally)

        builder.add_edge(START, "classify_intent")
        builder.add_conditional_edges(
            "classify_intent",
            route_judgment,
            {"create-event": "create-event", "no-action": "no-action"},
        )
        builder.add_edge("create-event", END)
        builder.add_edge("no-action", END)
        return builder.compile()

    async def _classify_intent(self, state: PipelineState) -> dict:
        judgment = await self._classifier.classify(state["text"], state["reference"])
        return {"judgment": judgment}

    async def _create_event(self, state: PipelineState) -> dict:
        try:
            descriptor = self._resolver.resolve(
                state["judgment"], state["text"], state["reference"]
            )
        except AmbiguousTiming as exc:
            logger.info(f"Ambiguous timing for message {state['text']!r}: {exc}")
            return {"reply": AMBIGUOUS_TIMING_REPLY}

        try:
            credential = await state["credentials"].get_credential()
        except Unauthenticated as exc:
            logger.info(f"No calendar credential available: {exc}")
            return {"reply": CONNECT_CALENDAR_REPLY}

        outcome = await self._submitter.submit(descriptor, credential)
        return {"outcome": outcome, "reply": outcome.user_message}

    async def _reply_conversationally(self, state: PipelineState) -> dict:
        return {"reply": state["judgment"].conversational_reply}

    async def _run_pipeline(
        self, text: str, credentials: CredentialProvider, reference: datetime
    ) -> str:
        result = await self._graph.ainvoke(
            {"text": text, "reference": reference, "credentials": credentials}
        )
        return result["reply"]

    async def _plain_reply(
        self, text: str, credentials: CredentialProvider, reference: datetime
    ) -> str:
        return await self._backend.complete(prompts.PLAIN_REPLY_PROMPT.format(message=text))

    async def handle(self, text: Optional[str], credentials: CredentialProvider) -> str:
        """Produce the reply for one message. Never raises."""
        try:
            message = ensure_message(text)
        except EmptyInput:
            return EMPTY_INPUT_REPLY

        reference = self._clock()
        for strategy in self.strategies:
            try:
                reply = await strategy.run(message, credentials, reference)
            except Exception as exc:
                logger.error(f"Strategy {strategy.name} failed: {exc}", exc_info=True)
                continue
            if reply and reply.strip():
                return reply
            logger.warning(f"Strategy {strategy.name} returned an empty reply")
        return FALLBACK_REPLY
