"""Map event descriptors onto calendar creation requests."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict

from agenda.domains.auth.credentials import Credential
from agenda.domains.calendars.providers.base import CalendarProvider
from agenda.domains.scheduling.schemas import EventDescriptor, SubmissionOutcome
from agenda.utils.errors import BackendUnavailable, SubmissionRejected

logger = logging.getLogger(__name__)

ALL_DAY_DESCRIPTION = "Event created by the Smart Agenda Assistant"
TIMED_DESCRIPTION = "Appointment created by the Smart Agenda Assistant"
ALL_DAY_COLOR_ID = "11"
TIMED_COLOR_ID = "9"

DEFAULT_REMINDERS = [
    {"method": "popup", "minutes": 30},
    {"method": "popup", "minutes": 10},
    {"method": "email", "minutes": 60},
]
REMINDER_SUMMARY = " 🔔 Reminders: 30 min and 10 min before, plus an email 1 h before"

DATE_DISPLAY_FORMAT = "%b %d, %Y"
DATETIME_DISPLAY_FORMAT = "%b %d, %Y at %H:%M"


def build_event_body(descriptor: EventDescriptor) -> Dict[str, Any]:
    """Build the Google Calendar event resource for a descriptor."""
    if descriptor.is_all_day:
        start_date = descriptor.start_instant.date()
        end_date = start_date + timedelta(days=1)
        return {
            "summary": descriptor.title,
            "start": {"date": start_date.isoformat()},
            "end": {"date": end_date.isoformat()},
            "description": ALL_DAY_DESCRIPTION,
            "colorId": ALL_DAY_COLOR_ID,
        }

    start = descriptor.start_instant.replace(microsecond=0)
    end = start + timedelta(minutes=descriptor.duration_minutes)
    return {
        "summary": descriptor.title,
        "start": {"dateTime": start.isoformat(timespec="seconds")},
        "end": {"dateTime": end.isoformat(timespec="seconds")},
        "reminders": {
            "useDefault": False,
            "overrides": [dict(reminder) for reminder in DEFAULT_REMINDERS],
        },
        "description": TIMED_DESCRIPTION,
        "colorId": TIMED_COLOR_ID,
    }


def format_confirmation(descriptor: EventDescriptor) -> str:
    kind = descriptor.kind.value.capitalize()
    if descriptor.is_all_day:
        when = descriptor.start_instant.strftime(DATE_DISPLAY_FORMAT)
        reminders = ""
    else:
        when = descriptor.start_instant.strftime(DATETIME_DISPLAY_FORMAT)
        reminders = REMINDER_SUMMARY
    return f'✅ {kind} scheduled successfully: "{descriptor.title}" on {when}{reminders}'


def _failure(reason: str) -> SubmissionOutcome:
    return SubmissionOutcome(
        success=False,
        user_message=f"❌ Error creating the event in Google Calendar: {reason}",
    )


class EventSubmitter:
    """Submits descriptors to the calendar provider. Never raises."""

    def __init__(self, provider: CalendarProvider) -> None:
        self._provider = provider

    async def submit(self, descriptor: EventDescriptor, credential: Credential) -> SubmissionOutcome:
        body = build_event_body(descriptor)
        try:
            created = await self._provider.create_event(body, credential)
        except SubmissionRejected as exc:
            logger.error(
                f"Calendar rejected event title={descriptor.title!r} "
                f"status={exc.status_code}: {exc.reason}"
            )
            return _failure(exc.reason)
        except BackendUnavailable as exc:
            logger.error(f"Calendar unavailable for event title={descriptor.title!r}: {exc}")
            return _failure(str(exc))
        except Exception as exc:
            logger.error(f"Error creating event title={descriptor.title!r}: {exc}", exc_info=True)
            return _failure(str(exc) or type(exc).__name__)

        event_id = created.get("id") if isinstance(created, dict) else None
        if not event_id:
            logger.error(f"Calendar response had no event id title={descriptor.title!r}")
            return _failure("the Google API did not confirm the event creation.")

        logger.info(f"Created event id={event_id} title={descriptor.title!r} all_day={descriptor.is_all_day}")
        return SubmissionOutcome(
            success=True,
            user_message=format_confirmation(descriptor),
            external_event_id=event_id,
        )
