"""Reconcile the two timing sources into a normalized event descriptor."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from agenda.domains.scheduling.schemas import (
    EventDescriptor,
    IntentJudgment,
    ResolvedTiming,
    TimingSource,
)
from agenda.domains.scheduling.time_resolver import resolve_time
from agenda.utils.errors import AmbiguousTiming

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 60

TimeResolver = Callable[[str, datetime], Optional[datetime]]


def parse_proposed_timestamp(value: Optional[str], reference: datetime) -> Optional[datetime]:
    """Parse the model's ISO-8601 timestamp into the reference's offset.

    Naive timestamps are read as local time in the reference offset. Returns
    None for absent or unparseable values.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        logger.warning(f"Ignoring unparseable model timestamp {value!r}")
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=reference.tzinfo)
    return parsed.astimezone(reference.tzinfo)


def reconcile_timing(
    heuristic: Optional[datetime],
    proposed: Optional[datetime],
    *,
    is_all_day: bool,
) -> ResolvedTiming:
    """Pick the authoritative instant.

    The heuristic instant always wins; the model-proposed one is only used
    when the heuristic found nothing.

    Raises:
        AmbiguousTiming: neither source produced an instant
    """
    if heuristic is not None:
        return ResolvedTiming(instant=heuristic, source=TimingSource.HEURISTIC, is_all_day=is_all_day)
    if proposed is not None:
        return ResolvedTiming(
            instant=proposed, source=TimingSource.MODEL_PROPOSED, is_all_day=is_all_day
        )
    raise AmbiguousTiming("Could not establish a date and time for the event")


def normalize_duration(duration_minutes: Optional[int], *, is_all_day: bool) -> int:
    if is_all_day:
        return 0
    if not duration_minutes or duration_minutes <= 0:
        return DEFAULT_DURATION_MINUTES
    return duration_minutes


class EventResolver:
    """Turns an event judgment into an EventDescriptor."""

    def __init__(self, time_resolver: TimeResolver = resolve_time) -> None:
        self._time_resolver = time_resolver

    def resolve(self, judgment: IntentJudgment, text: str, reference: datetime) -> EventDescriptor:
        """Resolve timing and normalize the event.

        Both timing sources are always evaluated so the decision can be audited.

        Raises:
            AmbiguousTiming: no usable instant from either source
        """
        heuristic = self._time_resolver(text, reference)
        proposed = parse_proposed_timestamp(judgment.proposed_timestamp, reference)

        timing = reconcile_timing(heuristic, proposed, is_all_day=judgment.is_all_day)
        logger.info(
            f"Timing resolved source={timing.source.value} instant={timing.instant.isoformat()} "
            f"heuristic={heuristic.isoformat() if heuristic else None} "
            f"proposed={proposed.isoformat() if proposed else None}"
        )

        return EventDescriptor(
            title=judgment.title,
            start_instant=timing.instant,
            duration_minutes=normalize_duration(
                judgment.duration_minutes, is_all_day=timing.is_all_day
            ),
            is_all_day=timing.is_all_day,
            kind=judgment.event_kind,
        )
