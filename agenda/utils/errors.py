"""Centralized exception classes for the application."""

from __future__ import annotations

from typing import Any


# Conversation pipeline errors
class EmptyInput(ValueError):
    """Raised when a message is empty or whitespace only."""


class MalformedResponse(RuntimeError):
    """Raised when the language model completion is not a valid intent judgment."""

    def __init__(self, message: str, *, raw_text: str | None = None) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class AmbiguousTiming(RuntimeError):
    """Raised when no concrete instant can be established for an event."""


class BackendUnavailable(RuntimeError):
    """Raised when the language model or calendar backend cannot be reached."""


class SubmissionRejected(RuntimeError):
    """Raised when the Google Calendar REST API rejects an event."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def reason(self) -> str:
        """Backend-provided error text, falling back to the exception message."""
        payload = self.payload
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str):
                return payload.get("error_description") or error
        if isinstance(payload, str) and payload.strip():
            return payload.strip()
        return str(self)


class Unauthenticated(RuntimeError):
    """Raised when no usable Google credential is available for the session."""


# Google OAuth errors
class GoogleOAuthError(RuntimeError):
    """Raised when Google OAuth flow fails."""


class GoogleStateError(RuntimeError):
    """Raised when the OAuth state token is invalid."""
