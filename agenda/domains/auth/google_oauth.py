from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from urllib.parse import urlencode

import httpx
import jwt

from agenda.core.config import get_settings
from agenda.utils.errors import GoogleOAuthError, GoogleStateError

STATE_AUDIENCE = "google-oauth-state"
AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
USERINFO_ENDPOINT = "https://www.googleapis.com/oauth2/v2/userinfo"


@dataclass(frozen=True)
class GoogleTokens:
    access_token: str
    refresh_token: str | None
    expires_in: int | None
    scope: str
    token_type: str
    id_token: str | None

    def expires_at(self, issued_at: datetime | None = None) -> datetime | None:
        if self.expires_in is None:
            return None
        base = issued_at or datetime.now(timezone.utc)
        return base + timedelta(seconds=self.expires_in)


@dataclass(frozen=True)
class GoogleProfile:
    id: str
    email: str
    name: str | None
    picture: str | None


def create_state_token(session_nonce: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": session_nonce,
        "aud": STATE_AUDIENCE,
        "nonce": secrets.token_urlsafe(16),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=5)).timestamp()),
    }
    return jwt.encode(payload, get_settings().session_secret, algorithm="HS256")


def decode_state_token(state: str) -> Dict[str, Any]:
    try:
        decoded = jwt.decode(
            state,
            get_settings().session_secret,
            algorithms=["HS256"],
            audience=STATE_AUDIENCE,
        )
    except jwt.PyJWTError as exc:
        raise GoogleStateError("Invalid or expired OAuth state token") from exc
    return decoded


def build_authorization_url(state: str) -> str:
    settings = get_settings()
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_oauth_redirect_uri_resolved,
        "response_type": "code",
        "scope": " ".join(settings.google_oauth_scopes),
        "access_type": "offline",
        "prompt": "consent",
        "include_granted_scopes": "true",
        "state": state,
    }
    return f"{AUTHORIZATION_ENDPOINT}?" + urlencode(params)


def _tokens_from_response(data: Dict[str, Any]) -> GoogleTokens:
    return GoogleTokens(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        expires_in=data.get("expires_in"),
        scope=data.get("scope", ""),
        token_type=data.get("token_type", ""),
        id_token=data.get("id_token"),
    )


async def exchange_code_for_tokens(code: str) -> GoogleTokens:
    settings = get_settings()
    payload = {
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": settings.google_oauth_redirect_uri_resolved,
    }
    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.post(
                TOKEN_ENDPOINT, data=payload, headers={"Accept": "application/json"}
            )
    except httpx.HTTPError as exc:
        raise GoogleOAuthError(f"Token exchange request failed: {exc}") from exc
    if response.status_code != httpx.codes.OK:
        raise GoogleOAuthError(
            f"Token exchange failed with status {response.status_code}: {response.text}"
        )
    data = response.json()
    if not data.get("access_token"):
        raise GoogleOAuthError(
            "Token exchange response did not include an access token."
        )
    return _tokens_from_response(data)


async def refresh_access_token(refresh_token: str) -> GoogleTokens:
    settings = get_settings()
    payload = {
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "refresh_token": refresh_token,
        "grant_type": "refresh_token",
    }
    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.post(
                TOKEN_ENDPOINT, data=payload, headers={"Accept": "application/json"}
            )
    except httpx.HTTPError as exc:
        raise GoogleOAuthError(f"Token refresh request failed: {exc}") from exc
    if response.status_code != httpx.codes.OK:
        raise GoogleOAuthError(
            f"Token refresh failed with status {response.status_code}: {response.text}"
        )
    data = response.json()
    if not data.get("access_token"):
        raise GoogleOAuthError("Token refresh response did not include an access token.")
    return _tokens_from_response(data)


async def fetch_profile(access_token: str) -> GoogleProfile:
    headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}
    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.get(USERINFO_ENDPOINT, headers=headers)
    except httpx.HTTPError as exc:
        raise GoogleOAuthError(f"Profile request failed: {exc}") from exc
    if response.status_code != httpx.codes.OK:
        raise GoogleOAuthError(
            f"Failed to load Google profile: {response.status_code} {response.text}"
        )
    data = response.json()
    profile_id = data.get("id") or data.get("sub")
    email = data.get("email")
    if not profile_id or not email:
        raise GoogleOAuthError("Google did not return a profile ID or email address.")

    return GoogleProfile(
        id=profile_id,
        email=email,
        name=data.get("name"),
        picture=data.get("picture"),
    )
