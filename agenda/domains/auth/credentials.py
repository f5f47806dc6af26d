"""Bearer credentials for the calendar backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, MutableMapping, Optional, Protocol

from agenda.domains.auth.google_oauth import refresh_access_token
from agenda.utils.errors import GoogleOAuthError, Unauthenticated

SESSION_ACCOUNT_KEY = "google_account"
TOKEN_REFRESH_LEEWAY = timedelta(minutes=5)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """Bearer token accepted by the calendar backend."""

    access_token: str


class CredentialProvider(Protocol):
    async def get_credential(self) -> Credential:
        """Return the current credential or raise Unauthenticated."""
        ...


def _parse_expiry(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        expires_at = datetime.fromisoformat(str(value))
    except ValueError:
        return None
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at


class SessionCredentialProvider:
    """Reads the Google account stored in the signed session cookie.

    Tokens close to expiry are refreshed with the stored refresh token and
    written back to the session.
    """

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self._session = session

    @property
    def account(self) -> Optional[dict]:
        account = self._session.get(SESSION_ACCOUNT_KEY)
        return account if isinstance(account, dict) else None

    async def get_credential(self) -> Credential:
        account = self.account
        if not account or not account.get("access_token"):
            raise Unauthenticated("User is not authenticated. Sign in with Google.")

        expires_at = _parse_expiry(account.get("expires_at"))
        if expires_at is not None and expires_at - TOKEN_REFRESH_LEEWAY <= datetime.now(timezone.utc):
            account = await self._refresh(account)

        return Credential(access_token=account["access_token"])

    async def _refresh(self, account: dict) -> dict:
        refresh_token = account.get("refresh_token")
        if not refresh_token:
            raise Unauthenticated("Google access token expired. Sign in with Google again.")
        try:
            tokens = await refresh_access_token(refresh_token)
        except GoogleOAuthError as exc:
            logger.warning(f"Token refresh failed email={account.get('email')}: {exc}")
            raise Unauthenticated("Could not refresh the Google access token.") from exc

        refreshed = dict(account)
        refreshed["access_token"] = tokens.access_token
        if tokens.refresh_token:
            refreshed["refresh_token"] = tokens.refresh_token
        expires = tokens.expires_at()
        refreshed["expires_at"] = expires.isoformat() if expires else None
        self._session[SESSION_ACCOUNT_KEY] = refreshed
        logger.info(f"Refreshed Google access token email={account.get('email')}")
        return refreshed
