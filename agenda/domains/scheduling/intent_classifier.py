"""Intent classification through the language model."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime

from pydantic import ValidationError

from agenda.domains.llm.backend import CompletionBackend
from agenda.domains.scheduling import prompts
from agenda.domains.scheduling.schemas import IntentJudgment
from agenda.domains.scheduling.time_reference import (
    build_relative_dates_cheat_sheet,
    describe_reference,
)
from agenda.utils.errors import MalformedResponse

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?")


def strip_markup(text: str) -> str:
    """Remove code fences and any chatter around the outermost JSON object."""
    cleaned = _FENCE_PATTERN.sub("", text).strip()
    if cleaned.startswith("{"):
        return cleaned
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start : end + 1]
    return cleaned


def format_utc_offset(reference: datetime) -> str:
    """Render the reference's offset as "+HH:MM" / "-HH:MM"."""
    offset = reference.strftime("%z")
    if not offset:
        return "+00:00"
    return f"{offset[:3]}:{offset[3:5]}"


def build_classification_prompt(text: str, reference: datetime) -> str:
    """Fill the classification prompt for one message."""
    return prompts.CLASSIFICATION_PROMPT.format(
        now_readable=describe_reference(reference),
        now_iso=reference.isoformat(timespec="seconds"),
        utc_offset=format_utc_offset(reference),
        time_reference=build_relative_dates_cheat_sheet(reference),
        message=text,
        current_year=reference.year,
        next_year=reference.year + 1,
        example_year=reference.year,
    )


def parse_judgment(completion: str) -> IntentJudgment:
    """Parse a raw completion into an IntentJudgment.

    Raises:
        MalformedResponse: if the stripped text is not the expected JSON shape
    """
    cleaned = strip_markup(completion or "")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponse(
            "Model response is not valid JSON", raw_text=completion
        ) from exc
    if not isinstance(data, dict):
        raise MalformedResponse("Model response is not a JSON object", raw_text=completion)
    try:
        return IntentJudgment.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponse(
            f"Model response does not match the judgment shape: {exc.error_count()} error(s)",
            raw_text=completion,
        ) from exc


class IntentClassifier:
    """Asks the language model whether a message is a scheduling request."""

    def __init__(self, backend: CompletionBackend) -> None:
        self._backend = backend

    async def classify(self, text: str, reference: datetime) -> IntentJudgment:
        """Classify one message.

        Raises:
            BackendUnavailable: the model could not be reached
            MalformedResponse: the completion was not a valid judgment
        """
        logger.info(f"Classifying intent for message: {text!r}")
        completion = await self._backend.complete(build_classification_prompt(text, reference))

        try:
            judgment = parse_judgment(completion)
        except MalformedResponse:
            logger.error(f"Failed to parse model response as JSON: {completion!r}")
            raise

        if judgment.is_event:
            logger.info(
                f"Classified as {judgment.event_kind.value}: title={judgment.title!r} "
                f"all_day={judgment.is_all_day} proposed={judgment.proposed_timestamp}"
            )
        else:
            logger.info("Classified as conversation (no scheduling request)")
        return judgment
