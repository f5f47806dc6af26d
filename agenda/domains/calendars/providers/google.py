"""Google Calendar provider implementation."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from agenda.core.config import Settings
from agenda.domains.auth.credentials import Credential
from agenda.domains.calendars.providers.base import CalendarProvider
from agenda.utils.errors import BackendUnavailable, SubmissionRejected

API_BASE_URL = "https://www.googleapis.com/calendar/v3"

logger = logging.getLogger(__name__)


@dataclass
class GoogleCalendarHttpClient:
    """Thin wrapper around httpx.AsyncClient for Google Calendar API requests."""

    timeout: float = 15.0
    transport: Optional[httpx.AsyncBaseTransport] = None
    _client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GoogleCalendarHttpClient":
        self._client = httpx.AsyncClient(
            base_url=API_BASE_URL, timeout=self.timeout, transport=self.transport
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
        self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "GoogleCalendarHttpClient must be used as an async context manager"
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        request_start = time.time()
        try:
            response = await self.client.request(
                method,
                path,
                headers=headers,
                json=json,
                params=params,
            )
        except httpx.HTTPError as exc:
            raise BackendUnavailable(f"Google Calendar API is unreachable: {exc}") from exc
        duration = time.time() - request_start
        logger.debug(f"{method} {path} status={response.status_code} {duration:.3f}s")

        if response.status_code >= 400:
            raise SubmissionRejected(
                f"Google Calendar API request failed with status {response.status_code}",
                status_code=response.status_code,
                payload=_safe_json(response),
            )

        result = _safe_json(response)
        if not isinstance(result, dict):
            raise SubmissionRejected(
                "Google Calendar API returned a non-JSON response",
                status_code=response.status_code,
                payload=result,
            )
        return result

    async def insert_event(
        self,
        *,
        access_token: str,
        calendar_id: str,
        event_data: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Insert a single event into a calendar."""
        path = f"/calendars/{_encode_path_segment(calendar_id)}/events"
        return await self._request("POST", path, access_token=access_token, json=event_data)


def _encode_path_segment(segment: str) -> str:
    """Encode a URL path segment."""
    return quote(segment, safe="")


def _safe_json(response: httpx.Response) -> Any:
    """Safely parse JSON from response."""
    try:
        return response.json()
    except ValueError:
        return response.text


class GoogleCalendarProvider(CalendarProvider):
    """Google Calendar provider implementation."""

    def __init__(
        self,
        calendar_id: str = "primary",
        *,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._calendar_id = calendar_id
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleCalendarProvider":
        return cls(settings.calendar_id, timeout=settings.calendar_timeout)

    async def create_event(
        self,
        event_data: Dict[str, Any],
        credential: Credential,
    ) -> Dict[str, Any]:
        """Create a new event in the configured calendar."""
        async with GoogleCalendarHttpClient(
            timeout=self._timeout, transport=self._transport
        ) as http_client:
            return await http_client.insert_event(
                access_token=credential.access_token,
                calendar_id=self._calendar_id,
                event_data=event_data,
            )
