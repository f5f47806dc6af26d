"""Tests for intent classification and judgment parsing."""

import pytest

from conftest import FakeCompletionBackend, event_json, judgment_json
from agenda.domains.scheduling.intent_classifier import (
    IntentClassifier,
    build_classification_prompt,
    parse_judgment,
    strip_markup,
)
from agenda.domains.scheduling.schemas import EventKind
from agenda.utils.errors import BackendUnavailable, MalformedResponse


class TestStripMarkup:
    def test_removes_json_fence(self):
        assert strip_markup('```json\n{"is_event": false}\n```') == '{"is_event": false}'

    def test_removes_bare_fence(self):
        assert strip_markup('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_drops_chatter_around_object(self):
        assert strip_markup('Here you go: {"a": 1} hope it helps') == '{"a": 1}'


class TestParseJudgment:
    def test_event_judgment(self):
        judgment = parse_judgment(event_json(duration=45))

        assert judgment.is_event is True
        assert judgment.event_kind == EventKind.APPOINTMENT
        assert judgment.title == "Doctor appointment"
        assert judgment.proposed_timestamp == "2025-12-10T15:00:00-03:00"
        assert judgment.duration_minutes == 45
        assert judgment.is_all_day is False

    def test_conversational_judgment(self):
        judgment = parse_judgment(judgment_json(is_event=False, response="Hello!"))

        assert judgment.is_event is False
        assert judgment.conversational_reply == "Hello!"
        assert judgment.event_kind is None

    def test_kind_is_case_insensitive(self):
        judgment = parse_judgment(event_json(event_type="Reminder"))

        assert judgment.event_kind == EventKind.REMINDER

    def test_missing_kind_defaults_by_all_day_flag(self):
        all_day = parse_judgment(
            judgment_json(is_event=True, is_all_day=True, summary="Holiday", datetime="2025-12-25")
        )
        timed = parse_judgment(judgment_json(is_event=True, summary="Call", datetime="2025-12-25T10:00:00"))

        assert all_day.event_kind == EventKind.EVENT
        assert timed.event_kind == EventKind.APPOINTMENT

    @pytest.mark.parametrize(
        "event_type, is_all_day, expected",
        [
            ("meeting", False, EventKind.APPOINTMENT),
            ("holiday", True, EventKind.EVENT),
            (42, False, EventKind.APPOINTMENT),
            ("compromisso", False, EventKind.APPOINTMENT),
            ("Lembrete", False, EventKind.REMINDER),
        ],
    )
    def test_unknown_kind_falls_back_instead_of_failing(self, event_type, is_all_day, expected):
        judgment = parse_judgment(event_json(event_type=event_type, is_all_day=is_all_day))

        assert judgment.is_event is True
        assert judgment.event_kind == expected

    def test_duration_defaults_to_sixty(self):
        judgment = parse_judgment(judgment_json(is_event=True, summary="Call", datetime="2025-12-25T10:00:00"))

        assert judgment.duration_minutes == 60

    @pytest.mark.parametrize(
        "completion",
        [
            "I think this is a meeting",
            "{not json",
            "[1, 2, 3]",
            '{"is_event": true, "datetime": "2025-12-10T15:00:00-03:00"}',
            '{"is_event": false}',
            '{"summary": "Missing flag"}',
            "",
        ],
    )
    def test_rejects_unexpected_shapes(self, completion):
        with pytest.raises(MalformedResponse):
            parse_judgment(completion)


class TestBuildPrompt:
    def test_prompt_carries_context_and_rules(self, reference):
        prompt = build_classification_prompt("my birthday is December 4th", reference)

        assert '"my birthday is December 4th"' in prompt
        assert "2025-11-01T10:30:00-03:00" in prompt
        assert "use 2025 if the date has not passed yet, otherwise use 2026" in prompt
        assert "Never round hours" in prompt
        assert "UTC OFFSET: -03:00" in prompt
        assert '"tomorrow": Sun 2025-11-02' in prompt

    def test_braces_in_message_are_kept(self, reference):
        prompt = build_classification_prompt("note {this}", reference)

        assert '"note {this}"' in prompt


class TestIntentClassifier:
    @pytest.mark.asyncio
    async def test_classify_sends_prompt_and_parses(self, reference):
        backend = FakeCompletionBackend("```json\n" + event_json() + "\n```")
        classifier = IntentClassifier(backend)

        judgment = await classifier.classify("doctor on december 10th at 15h", reference)

        assert judgment.is_event is True
        assert len(backend.prompts) == 1
        assert "doctor on december 10th at 15h" in backend.prompts[0]

    @pytest.mark.asyncio
    async def test_malformed_response_is_not_retried(self, reference):
        backend = FakeCompletionBackend("garbage", event_json())
        classifier = IntentClassifier(backend)

        with pytest.raises(MalformedResponse) as excinfo:
            await classifier.classify("hello", reference)

        assert excinfo.value.raw_text == "garbage"
        assert len(backend.prompts) == 1

    @pytest.mark.asyncio
    async def test_backend_errors_propagate(self, reference):
        classifier = IntentClassifier(FakeCompletionBackend(BackendUnavailable("timeout")))

        with pytest.raises(BackendUnavailable):
            await classifier.classify("hello", reference)
