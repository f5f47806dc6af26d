"""Google sign-in routes backing the calendar connection."""

from __future__ import annotations

import logging
import secrets
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from agenda.core.config import get_settings
from agenda.domains.auth import google_oauth
from agenda.domains.auth.credentials import SESSION_ACCOUNT_KEY
from agenda.domains.auth.schemas import AuthStatusResponse, LoginResponse, LogoutResponse
from agenda.utils.errors import GoogleOAuthError, GoogleStateError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

SESSION_NONCE_KEY = "oauth_nonce"


def _app_redirect(result: str, message: Optional[str] = None) -> RedirectResponse:
    params = {"login": result}
    if message:
        params["message"] = message
    return RedirectResponse(url="/?" + urlencode(params), status_code=status.HTTP_302_FOUND)


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(request: Request) -> AuthStatusResponse:
    """Report whether the session holds a Google Calendar connection."""
    account = request.session.get(SESSION_ACCOUNT_KEY)
    if not account or not account.get("access_token"):
        return AuthStatusResponse(connected=False, message="Google Calendar is not connected.")
    return AuthStatusResponse(
        connected=True,
        email=account.get("email"),
        name=account.get("name"),
    )


@router.post("/login", response_model=LoginResponse)
async def login() -> LoginResponse:
    """Tell the client whether to start the Google OAuth redirect."""
    if not get_settings().google_oauth_configured:
        return LoginResponse(success=False, message="Google OAuth is not configured on the server.")
    return LoginResponse(
        success=True,
        redirect_to_oauth=True,
        message="Redirecting to Google authentication...",
    )


@router.get("/google")
async def start_google_oauth(request: Request) -> RedirectResponse:
    """Redirect the browser to Google's consent screen."""
    if not get_settings().google_oauth_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google OAuth is not configured on the server.",
        )
    nonce = secrets.token_urlsafe(16)
    request.session[SESSION_NONCE_KEY] = nonce
    state = google_oauth.create_state_token(nonce)
    return RedirectResponse(
        url=google_oauth.build_authorization_url(state),
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/google/callback")
async def google_oauth_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
) -> RedirectResponse:
    """Complete the OAuth flow and store the Google account in the session."""
    if error:
        logger.warning(f"Google OAuth returned error={error}")
        return _app_redirect("error", error)
    if not code or not state:
        return _app_redirect("error", "Missing authorization code.")

    expected_nonce = request.session.pop(SESSION_NONCE_KEY, None)
    try:
        decoded = google_oauth.decode_state_token(state)
        if not expected_nonce or decoded.get("sub") != expected_nonce:
            raise GoogleStateError("OAuth state does not belong to this session")
        tokens = await google_oauth.exchange_code_for_tokens(code)
        profile = await google_oauth.fetch_profile(tokens.access_token)
    except GoogleStateError as exc:
        logger.warning(f"Rejected OAuth callback: {exc}")
        return _app_redirect("error", "Sign-in expired, please try again.")
    except GoogleOAuthError as exc:
        logger.error(f"Google OAuth failed: {exc}", exc_info=True)
        return _app_redirect("error", "Could not connect to Google.")

    expires_at = tokens.expires_at()
    request.session[SESSION_ACCOUNT_KEY] = {
        "access_token": tokens.access_token,
        "refresh_token": tokens.refresh_token,
        "expires_at": expires_at.isoformat() if expires_at else None,
        "email": profile.email,
        "name": profile.name,
    }
    logger.info(f"Connected Google account email={profile.email}")
    return _app_redirect("success")


@router.post("/logout", response_model=LogoutResponse)
async def logout(request: Request) -> LogoutResponse:
    """Forget the Google account stored in the session."""
    request.session.clear()
    return LogoutResponse(success=True, message="Disconnected from Google Calendar")
