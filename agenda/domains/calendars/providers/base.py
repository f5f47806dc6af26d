"""Base calendar provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from agenda.domains.auth.credentials import Credential


class CalendarProvider(ABC):
    """Abstract base class for calendar providers."""

    @abstractmethod
    async def create_event(
        self,
        event_data: Dict[str, Any],
        credential: Credential,
    ) -> Dict[str, Any]:
        """Create a new event and return the created resource.

        Raises:
            SubmissionRejected: the calendar refused the event
            BackendUnavailable: the calendar could not be reached
        """
        ...
