"""Heuristic phrase-to-instant resolution.

Runs independently of the language model so its answer can be used as a
cross-check against the timestamp the model proposes.

The clock time and the day are found separately. Clock shorthands are
rewritten to HH:MM first; relative days ("tomorrow", "friday", "the 5th")
are handled here; dateparser is only consulted for calendar dates that carry
a day number. The reference's time of day never leaks into the result: a day
without a clock time resolves to midnight.
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime, time, timedelta
from typing import List, NamedTuple, Optional, Sequence, Tuple

from dateparser.search import search_dates

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES: Tuple[str, ...] = ("en",)

_MONTH_NAMES = "|".join(
    sorted(
        {name.lower() for name in calendar.month_name[1:]}
        | {abbr.lower() for abbr in calendar.month_abbr[1:]},
        key=len,
        reverse=True,
    )
)
_WEEKDAY_NAMES = [name.lower() for name in calendar.day_name]

# Clock shorthands, rewritten in this order
_PERIOD_PATTERN = re.compile(
    r"\b(\d{1,2})(?::(\d{2}))?\s+(?:o['’]?clock\s+)?"
    r"(in\s+the\s+(?:morning|afternoon|evening)|at\s+night)\b",
    re.IGNORECASE,
)
_AMPM_PATTERN = re.compile(
    r"\b(\d{1,2})(?::(\d{2}))?\s*(a\.m\.|p\.m\.|am|pm)(?!\w)", re.IGNORECASE
)
_OCLOCK_PATTERN = re.compile(r"\b(\d{1,2})\s*o['’]?clock\b", re.IGNORECASE)
# "14h", "14h30", "9 h"
_HOUR_SUFFIX_PATTERN = re.compile(r"\b(\d{1,2})\s?h(\d{2})?\b", re.IGNORECASE)
_NOON_PATTERN = re.compile(r"\bnoon\b", re.IGNORECASE)
_MIDNIGHT_PATTERN = re.compile(r"\bmidnight\b", re.IGNORECASE)
_AT_HOUR_PATTERN = re.compile(r"\bat\s+(\d{1,2})\b(?![:/.]?\d)", re.IGNORECASE)

_CLOCK_TOKEN_PATTERN = re.compile(
    r"(?:\bat\s+)?\b([01]?\d|2[0-3]):([0-5]\d)\b", re.IGNORECASE
)

_RELATIVE_DAY_PATTERN = re.compile(
    r"\b(day\s+after\s+tomorrow|tomorrow|today|tonight)\b", re.IGNORECASE
)
_WEEKDAY_PATTERN = re.compile(
    r"\b(?:(this|next)\s+)?(" + "|".join(_WEEKDAY_NAMES) + r")\b", re.IGNORECASE
)
# "the 5th", "on the 12th", "on 3rd"; "the 5th of December" is a calendar date
_ORDINAL_DAY_PATTERN = re.compile(
    r"\b(?:on\s+the|the|on)\s+(\d{1,2})(?:st|nd|rd|th)\b(?!\s+of\b)", re.IGNORECASE
)
_TRAILING_MONTH_PATTERN = re.compile(r"\b(?:" + _MONTH_NAMES + r")\.?\s*$", re.IGNORECASE)
_OFFSET_PATTERN = re.compile(
    r"\bin\s+(\d{1,3})\s+(minutes?|mins?|hours?|hrs?)\b", re.IGNORECASE
)

_MONTH_DAY_PATTERN = re.compile(
    r"\b(?:" + _MONTH_NAMES + r")\.?\s+(?:the\s+)?\d{1,2}(?:st|nd|rd|th)?\b"
    r"|\b\d{1,2}(?:st|nd|rd|th)?\s+(?:of\s+)?(?:" + _MONTH_NAMES + r")\b",
    re.IGNORECASE,
)
_NUMERIC_DATE_PATTERN = re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b|\b\d{4}-\d{2}-\d{2}\b")
_DAY_COUNT_PATTERN = re.compile(r"\bin\s+\d+\s+(?:days?|weeks?|months?|years?)\b", re.IGNORECASE)
_YEAR_PATTERN = re.compile(r"\b\d{4}\b")


class _DayCandidate(NamedTuple):
    start: int
    end: int
    phrase: str
    day: date


def _hour_minute(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def _period_to_clock(match: re.Match) -> str:
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    period = match.group(3).lower()
    if hour > 23 or minute > 59:
        return match.group(0)
    if "morning" in period:
        if hour == 12:
            hour = 0
    elif "night" in period and hour == 12:
        hour = 0
    elif hour < 12:
        hour += 12
    return _hour_minute(hour, minute)


def _to_24h(match: re.Match) -> str:
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if hour > 12 or minute > 59:
        return match.group(0)
    meridiem = match.group(3)[0].lower()
    if meridiem == "p" and hour < 12:
        hour += 12
    elif meridiem == "a" and hour == 12:
        hour = 0
    return _hour_minute(hour, minute)


def _bare_hour_to_clock(match: re.Match) -> str:
    hour = int(match.group(1))
    if hour > 23:
        return match.group(0)
    return _hour_minute(hour, 0)


def _hour_suffix_to_clock(match: re.Match) -> str:
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if hour > 23 or minute > 59:
        return match.group(0)
    return _hour_minute(hour, minute)


def _at_hour_to_clock(match: re.Match) -> str:
    hour = int(match.group(1))
    if hour > 23:
        return match.group(0)
    return f"at {_hour_minute(hour, 0)}"


def normalize_clock_phrases(text: str) -> str:
    """Rewrite clock shorthands into HH:MM so the hour survives verbatim.

    "2pm" -> "14:00", "3 in the afternoon" -> "15:00", "5 o'clock" -> "05:00",
    "14h30" -> "14:30", "noon" -> "12:00", "at 10" -> "at 10:00".
    """
    normalized = _PERIOD_PATTERN.sub(_period_to_clock, text)
    normalized = _AMPM_PATTERN.sub(_to_24h, normalized)
    normalized = _OCLOCK_PATTERN.sub(_bare_hour_to_clock, normalized)
    normalized = _HOUR_SUFFIX_PATTERN.sub(_hour_suffix_to_clock, normalized)
    normalized = _NOON_PATTERN.sub("12:00", normalized)
    normalized = _MIDNIGHT_PATTERN.sub("00:00", normalized)
    return _AT_HOUR_PATTERN.sub(_at_hour_to_clock, normalized)


def _blank(text: str, start: int, end: int) -> str:
    # Same-length padding keeps match positions valid
    return text[:start] + " " * (end - start) + text[end:]


def _ordinal_day(day_number: int, today: date) -> Optional[date]:
    """Next date with this day of month, starting from today."""
    if not 1 <= day_number <= 31:
        return None
    year, month = today.year, today.month
    for _ in range(13):
        if day_number <= calendar.monthrange(year, month)[1]:
            candidate = date(year, month, day_number)
            if candidate >= today:
                return candidate
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return None


def _relative_days(text: str, today: date) -> Tuple[List[_DayCandidate], str]:
    """Find relative day phrases and blank them out of the text."""
    candidates: List[_DayCandidate] = []

    for match in _RELATIVE_DAY_PATTERN.finditer(text):
        word = " ".join(match.group(1).lower().split())
        offset = {"day after tomorrow": 2, "tomorrow": 1}.get(word, 0)
        candidates.append(
            _DayCandidate(match.start(), match.end(), match.group(0), today + timedelta(days=offset))
        )

    for match in _WEEKDAY_PATTERN.finditer(text):
        qualifier = (match.group(1) or "").lower()
        days_ahead = (_WEEKDAY_NAMES.index(match.group(2).lower()) - today.weekday()) % 7
        if days_ahead == 0 and qualifier != "this":
            days_ahead = 7
        candidates.append(
            _DayCandidate(match.start(), match.end(), match.group(0), today + timedelta(days=days_ahead))
        )

    for match in _ORDINAL_DAY_PATTERN.finditer(text):
        if _TRAILING_MONTH_PATTERN.search(text[: match.start()]):
            continue
        day = _ordinal_day(int(match.group(1)), today)
        if day is not None:
            candidates.append(_DayCandidate(match.start(), match.end(), match.group(0), day))

    for candidate in candidates:
        text = _blank(text, candidate.start, candidate.end)
    return candidates, text


def _is_calendar_date_phrase(phrase: str) -> bool:
    """Accept dateparser matches only when a day number anchors them.

    Lone words such as "may", "sun", "second" or "march" are dropped, as are
    bare numbers and durations.
    """
    return bool(
        _MONTH_DAY_PATTERN.search(phrase)
        or _NUMERIC_DATE_PATTERN.search(phrase)
        or _DAY_COUNT_PATTERN.search(phrase)
    )


def _roll_year_forward(candidate: date) -> date:
    try:
        return candidate.replace(year=candidate.year + 1)
    except ValueError:
        # Feb 29 has no counterpart next year
        return candidate.replace(year=candidate.year + 1, day=28)


def _calendar_dates(
    text: str, base: datetime, languages: Sequence[str]
) -> List[_DayCandidate]:
    if not text.strip():
        return []
    matches = search_dates(
        text,
        languages=list(languages),
        settings={
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": base,
            "RETURN_AS_TIMEZONE_AWARE": False,
        },
    )
    candidates = []
    for phrase, value in matches or []:
        if not _is_calendar_date_phrase(phrase):
            logger.debug(f"Ignoring date-like phrase {phrase!r}")
            continue
        day = value.date()
        named = _MONTH_DAY_PATTERN.search(phrase) or _NUMERIC_DATE_PATTERN.search(phrase)
        if day < base.date() and named and not _YEAR_PATTERN.search(phrase):
            day = _roll_year_forward(day)
        start = text.find(phrase)
        if start == -1:
            start = len(text)
        candidates.append(_DayCandidate(start, start + len(phrase), phrase, day))
    return candidates


def _pick_day(candidates: List[_DayCandidate], clock_position: Optional[int]) -> _DayCandidate:
    """First day phrase, or the one closest to the clock time when there is one."""
    if clock_position is None:
        return min(candidates, key=lambda c: c.start)
    return min(
        candidates,
        key=lambda c: (min(abs(c.start - clock_position), abs(c.end - clock_position)), c.start),
    )


def resolve_time(
    text: str,
    reference: datetime,
    languages: Sequence[str] = DEFAULT_LANGUAGES,
) -> Optional[datetime]:
    """Find the point in time a message refers to.

    Args:
        text: Raw user message
        reference: Timezone-aware "now" every relative phrase is anchored to
        languages: dateparser language codes used for calendar dates

    Returns:
        A datetime carrying the reference's offset, or None when the message
        contains no recognizable temporal phrase.
    """
    if not text or not text.strip():
        return None

    base = reference.replace(tzinfo=None)
    normalized = normalize_clock_phrases(text)

    offset_match = _OFFSET_PATTERN.search(normalized)
    if offset_match:
        amount = int(offset_match.group(1))
        unit = offset_match.group(2).lower()
        delta = timedelta(hours=amount) if unit.startswith("h") else timedelta(minutes=amount)
        resolved = (reference + delta).replace(second=0, microsecond=0)
        logger.debug(f"Resolved {offset_match.group(0)!r} in {text!r} to {resolved.isoformat()}")
        return resolved

    clock: Optional[time] = None
    clock_position: Optional[int] = None
    clock_match = _CLOCK_TOKEN_PATTERN.search(normalized)
    remaining = normalized
    if clock_match:
        clock = time(int(clock_match.group(1)), int(clock_match.group(2)))
        clock_position = clock_match.start()
        for match in _CLOCK_TOKEN_PATTERN.finditer(normalized):
            remaining = _blank(remaining, match.start(), match.end())

    candidates, remaining = _relative_days(remaining, base.date())
    candidates.extend(_calendar_dates(remaining, base, languages))

    if candidates:
        chosen = _pick_day(candidates, clock_position)
        resolved_naive = datetime.combine(chosen.day, clock or time(0, 0))
        phrase = chosen.phrase
    elif clock is not None:
        resolved_naive = datetime.combine(base.date(), clock)
        if resolved_naive < base:
            resolved_naive += timedelta(days=1)
        phrase = clock_match.group(0)
    else:
        logger.debug(f"No temporal phrase found in {text!r}")
        return None

    resolved = resolved_naive.replace(tzinfo=reference.tzinfo)
    logger.debug(
        f"Resolved {phrase!r} clock={clock.isoformat() if clock else None} "
        f"in {text!r} to {resolved.isoformat()}"
    )
    return resolved
