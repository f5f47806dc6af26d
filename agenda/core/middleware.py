"""HTTP request/response logging middleware."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from agenda.domains.auth.credentials import SESSION_ACCOUNT_KEY

logger = logging.getLogger(__name__)

# Paths to skip logging (health checks, static assets)
SKIP_LOGGING_PATHS = {"/healthz", "/", "/script.js", "/favicon.ico"}


def _session_email(request: Request) -> Optional[str]:
    # The session is only present when SessionMiddleware wraps this middleware
    session = request.scope.get("session") or {}
    account = session.get(SESSION_ACCOUNT_KEY) or {}
    return account.get("email")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in SKIP_LOGGING_PATHS:
            return await call_next(request)

        start_time = time.time()
        method = request.method
        path = request.url.path

        logger.info(f"{method} {path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"{method} {path} user={_session_email(request) or 'anonymous'} "
                f"ERROR {duration:.3f}s: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        status_code = response.status_code
        status_text = "OK" if 200 <= status_code < 300 else "ERROR" if status_code >= 400 else "REDIRECT"

        logger.info(
            f"{method} {path} user={_session_email(request) or 'anonymous'} "
            f"{status_code} {status_text} {duration:.3f}s"
        )

        return response
