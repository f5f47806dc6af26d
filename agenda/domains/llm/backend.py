"""Language model completion backend."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from langchain.chat_models import init_chat_model

from agenda.core.config import Settings
from agenda.utils.errors import BackendUnavailable

logger = logging.getLogger(__name__)


class CompletionBackend(ABC):
    """Prompt in, free-text completion out."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the model's completion for a single prompt."""
        ...


def message_text(message: Any) -> str:
    """Extract plain text from a chat model response.

    Providers return either a string or a list of content parts.
    """
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


class LangChainCompletionBackend(CompletionBackend):
    """Completion backend over any LangChain chat model."""

    def __init__(
        self,
        model: str,
        *,
        temperature: float = 0.2,
        api_key: Optional[str] = None,
        llm: Optional[Any] = None,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._api_key = api_key
        self._llm = llm

    @classmethod
    def from_settings(cls, settings: Settings) -> "LangChainCompletionBackend":
        return cls(
            settings.llm_model,
            temperature=settings.llm_temperature,
            api_key=settings.google_api_key,
        )

    def _get_llm(self) -> Any:
        # Built lazily: provider clients validate their API key on construction
        if self._llm is None:
            kwargs: dict[str, Any] = {"temperature": self._temperature}
            if self._api_key:
                kwargs["api_key"] = self._api_key
            self._llm = init_chat_model(self._model, **kwargs)
        return self._llm

    async def complete(self, prompt: str) -> str:
        try:
            llm = self._get_llm()
            response = await llm.ainvoke([{"role": "user", "content": prompt}])
        except Exception as exc:
            logger.error(f"Language model request failed model={self._model}: {exc}", exc_info=True)
            raise BackendUnavailable(f"Language model request failed: {exc}") from exc
        return message_text(response)
