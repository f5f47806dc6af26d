"""Tests for heuristic time resolution."""

from datetime import date, datetime

import pytest

from conftest import BRT
from agenda.domains.scheduling.time_resolver import normalize_clock_phrases, resolve_time


class TestNormalizeClockPhrases:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("lunch at 2pm", "lunch at 14:00"),
            ("call at 9:30am", "call at 09:30"),
            ("call at 3 p.m.", "call at 15:00"),
            ("party at 12am", "party at 00:00"),
            ("meeting at 12pm", "meeting at 12:00"),
            ("doctor at 14h", "doctor at 14:00"),
            ("doctor at 14h30", "doctor at 14:30"),
            ("meeting at 3 in the afternoon", "meeting at 15:00"),
            ("run at 7 in the morning", "run at 07:00"),
            ("dinner at 8 in the evening", "dinner at 20:00"),
            ("call at 5 o'clock", "call at 05:00"),
            ("lunch at noon", "lunch at 12:00"),
            ("deploy at midnight", "deploy at 00:00"),
            ("meeting at 10", "meeting at 10:00"),
            ("meeting at 10 tomorrow", "meeting at 10:00 tomorrow"),
        ],
    )
    def test_rewrites_clock_shorthands(self, text, expected):
        assert normalize_clock_phrases(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["a 3 hours drive", "open 24h", "room 12", "back in the afternoon", "at 12/10"],
    )
    def test_leaves_other_text_alone(self, text):
        assert normalize_clock_phrases(text) == text


class TestResolveTime:
    def test_date_without_year_stays_in_current_year(self, reference):
        resolved = resolve_time("Birthday party December 4th", reference)

        assert resolved is not None
        assert resolved.date() == date(2025, 12, 4)

    def test_passed_date_rolls_to_next_year(self, reference):
        resolved = resolve_time("Trip on January 5th", reference)

        assert resolved is not None
        assert resolved.date() == date(2026, 1, 5)

    def test_explicit_hour_is_kept_verbatim(self, reference):
        resolved = resolve_time("Dentist December 10 at 14h", reference)

        assert resolved is not None
        assert resolved.date() == date(2025, 12, 10)
        assert (resolved.hour, resolved.minute) == (14, 0)

    def test_result_carries_reference_offset(self, reference):
        resolved = resolve_time("Dentist December 10 at 14h", reference)

        assert resolved.utcoffset() == reference.utcoffset()

    @pytest.mark.parametrize("text", ["", "   ", "hello"])
    def test_no_temporal_phrase(self, reference, text):
        assert resolve_time(text, reference) is None


class TestRelativePhrases:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Call mom tomorrow at 2pm", datetime(2025, 11, 2, 14, 0, tzinfo=BRT)),
            ("meeting tomorrow at 3 in the afternoon", datetime(2025, 11, 2, 15, 0, tzinfo=BRT)),
            ("I may have a dentist appointment tomorrow at 3pm", datetime(2025, 11, 2, 15, 0, tzinfo=BRT)),
            ("gym the day after tomorrow at 7 in the morning", datetime(2025, 11, 3, 7, 0, tzinfo=BRT)),
            ("team lunch on Friday at noon", datetime(2025, 11, 7, 12, 0, tzinfo=BRT)),
            ("standup next Monday at 9:30", datetime(2025, 11, 3, 9, 30, tzinfo=BRT)),
            ("dinner tonight at 8 in the evening", datetime(2025, 11, 1, 20, 0, tzinfo=BRT)),
        ],
    )
    def test_relative_day_with_clock(self, reference, text, expected):
        assert resolve_time(text, reference) == expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("dentist tomorrow", datetime(2025, 11, 2, 0, 0, tzinfo=BRT)),
            ("pick up the car on Wednesday", datetime(2025, 11, 5, 0, 0, tzinfo=BRT)),
            ("Birthday party December 4th", datetime(2025, 12, 4, 0, 0, tzinfo=BRT)),
        ],
    )
    def test_day_without_clock_is_midnight(self, reference, text, expected):
        assert resolve_time(text, reference) == expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("remind me to pay rent on the 5th", date(2025, 11, 5)),
            ("pay the bill the 1st", date(2025, 11, 1)),
            ("rent is due on the 31st", date(2025, 12, 31)),
        ],
    )
    def test_ordinal_day_is_next_such_day(self, reference, text, expected):
        resolved = resolve_time(text, reference)

        assert resolved.date() == expected
        assert (resolved.hour, resolved.minute) == (0, 0)

    def test_ordinal_day_after_month_is_calendar_date(self, reference):
        resolved = resolve_time("concert on the 5th of December", reference)

        assert resolved.date() == date(2025, 12, 5)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("call the bank at 18:00", datetime(2025, 11, 1, 18, 0, tzinfo=BRT)),
            ("call the bank at 9:00", datetime(2025, 11, 2, 9, 0, tzinfo=BRT)),
            ("call the bank at 10:30", datetime(2025, 11, 1, 10, 30, tzinfo=BRT)),
        ],
    )
    def test_time_only_rolls_to_tomorrow_once_passed(self, reference, text, expected):
        assert resolve_time(text, reference) == expected

    def test_offset_from_now(self, reference):
        assert resolve_time("remind me in 2 hours", reference) == datetime(2025, 11, 1, 12, 30, tzinfo=BRT)


class TestFalsePositives:
    @pytest.mark.parametrize(
        "text",
        [
            "I may be late",
            "we will march on",
            "the sun is out",
            "wait a second",
            "sat down with the team",
            "book 3 seats",
        ],
    )
    def test_ordinary_words_are_not_dates(self, reference, text):
        assert resolve_time(text, reference) is None

    def test_month_with_day_number_is_still_a_date(self, reference):
        resolved = resolve_time("graduation on May 5", reference)

        assert resolved.date() == date(2026, 5, 5)
