"""Time reference generation for the classification prompt.

Gives the language model a concrete mapping from common relative date
expressions to calendar dates, anchored to the request's reference instant.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _format_date(d: date) -> str:
    weekday_abbr = calendar.day_abbr[d.weekday()]
    return f"{weekday_abbr} {d.isoformat()}"


def describe_reference(reference: datetime) -> str:
    """Human-readable "now" line, e.g. "Saturday, November 01, 2025 at 10:30"."""
    return reference.strftime("%A, %B %d, %Y at %H:%M")


def build_relative_dates_cheat_sheet(reference: datetime) -> str:
    """Generate a relative dates cheat sheet.

    Args:
        reference: Timezone-aware datetime in the interpretation offset

    Returns:
        Formatted string with relative date expressions mapped to dates
    """
    today = reference.date()

    items = ["RELATIVE DATES CHEAT SHEET:"]
    items.append(f'- "today": {_format_date(today)}')
    items.append(f'- "tomorrow": {_format_date(today + timedelta(days=1))}')
    items.append(f'- "day after tomorrow": {_format_date(today + timedelta(days=2))}')

    # Days of week (next occurrence, 1-7 days ahead)
    for i, day_name in enumerate(WEEKDAY_NAMES):
        days_ahead = (i - today.weekday()) % 7
        if days_ahead == 0:
            days_ahead = 7
        items.append(f'- "{day_name}": {_format_date(today + timedelta(days=days_ahead))}')

    # "Next week" = the Monday-Friday following the current week
    next_week_start = today - timedelta(days=today.weekday()) + timedelta(days=7)
    next_week_end = next_week_start + timedelta(days=4)
    items.append(f'- "next week": {_format_date(next_week_start)} - {_format_date(next_week_end)}')

    if today.weekday() == 6:  # Sunday: the weekend already started
        this_weekend_sat = today - timedelta(days=1)
    else:
        this_weekend_sat = today + timedelta(days=5 - today.weekday())
    items.append(
        f'- "this weekend": {_format_date(this_weekend_sat)} - '
        f"{_format_date(this_weekend_sat + timedelta(days=1))}"
    )

    return "\n".join(items)
