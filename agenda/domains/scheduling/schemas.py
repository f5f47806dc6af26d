"""Scheduling domain schemas."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EventKind(str, Enum):
    """Kind of calendar entry the user asked for."""

    APPOINTMENT = "appointment"
    EVENT = "event"
    REMINDER = "reminder"


EVENT_KIND_ALIASES = {
    "compromisso": EventKind.APPOINTMENT.value,
    "evento": EventKind.EVENT.value,
    "lembrete": EventKind.REMINDER.value,
}
_KNOWN_KINDS = {kind.value for kind in EventKind} | set(EVENT_KIND_ALIASES)


class TimingSource(str, Enum):
    """Which extraction path produced the authoritative instant."""

    HEURISTIC = "heuristic"
    MODEL_PROPOSED = "model_proposed"


class IntentJudgment(BaseModel):
    """Structured judgment returned by the language model for one message.

    Field aliases match the JSON keys the classification prompt asks for.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    is_event: bool
    event_kind: Optional[EventKind] = Field(default=None, alias="event_type")
    is_all_day: bool = False
    title: str = Field(default="", alias="summary")
    proposed_timestamp: Optional[str] = Field(default=None, alias="datetime")
    duration_minutes: Optional[int] = Field(default=60, alias="duration")
    conversational_reply: Optional[str] = Field(default=None, alias="response")

    @field_validator("event_kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        # Unknown kinds ("meeting", ...) fall back to the all-day based default
        if isinstance(value, EventKind):
            return value
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        return EVENT_KIND_ALIASES.get(value, value) if value in _KNOWN_KINDS else None

    @field_validator("proposed_timestamp", mode="before")
    @classmethod
    def _blank_timestamp_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> Any:
        # Models occasionally answer "60" or 60.0
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            value = value.strip()
            return int(float(value)) if value else None
        return value

    @model_validator(mode="after")
    def _check_branch(self) -> "IntentJudgment":
        if self.is_event:
            self.title = self.title.strip()
            if not self.title:
                raise ValueError("event judgments require a summary")
            if self.event_kind is None:
                self.event_kind = EventKind.EVENT if self.is_all_day else EventKind.APPOINTMENT
        else:
            if not self.conversational_reply or not self.conversational_reply.strip():
                raise ValueError("non-event judgments require a response")
            self.event_kind = None
        return self


@dataclass(frozen=True)
class ResolvedTiming:
    """Outcome of reconciling the heuristic and model-proposed instants."""

    instant: datetime
    source: TimingSource
    is_all_day: bool


@dataclass(frozen=True)
class EventDescriptor:
    """Normalized event, ready to be submitted to the calendar backend."""

    title: str
    start_instant: datetime
    duration_minutes: int
    is_all_day: bool
    kind: EventKind = EventKind.APPOINTMENT


@dataclass(frozen=True)
class SubmissionOutcome:
    """Terminal result of one calendar submission."""

    success: bool
    user_message: str
    external_event_id: Optional[str] = None


# HTTP payloads
class MessageRequest(BaseModel):
    text: Optional[str] = None


class MessageResponse(BaseModel):
    reply: str
