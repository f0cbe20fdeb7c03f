"""Request tracing for the referrals service.

Every request gets an ID (propagated from X-Request-ID when the caller sends
one) and, when the session cookie holds a signed-in user, that user's ID is
bound to the log context as well. Query strings never reach the logs since
recovery and confirmation links carry one-time tokens in them.
"""
import time
from typing import Callable, Optional
from urllib.parse import urlsplit

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.auth.models import AuthUser
from libs.common.logging import (
    bind_user,
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)
from libs.common.supabase import AUTH_STORAGE_KEY

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health"})


def _session_user_id(request: Request) -> Optional[str]:
    # Only populated when SessionMiddleware wraps this middleware
    session = request.scope.get("session") or {}
    user = AuthUser.from_stored_session(session.get(AUTH_STORAGE_KEY))
    return user.id if user else None


def _outcome_fields(response: Response, elapsed: float) -> dict:
    fields = {
        "status_code": response.status_code,
        "duration_ms": round(elapsed * 1000, 2),
    }
    location = response.headers.get("location")
    if location:
        fields["redirect_to"] = urlsplit(location).path or "/"
    return fields


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request and user identity to the log context for one request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        request.state.request_id = request_id
        bind_user(_session_user_id(request))
        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error while serving request",
                extra={"extra_fields": {
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                }},
            )
            raise
        else:
            if not quiet:
                fields = _outcome_fields(response, time.perf_counter() - started)
                if response.status_code >= 500:
                    logger.error("Request failed", extra={"extra_fields": fields})
                elif response.status_code >= 400:
                    logger.warning("Request rejected", extra={"extra_fields": fields})
                else:
                    logger.info("Request served", extra={"extra_fields": fields})
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install request tracing on ``app``.

    Add SessionMiddleware after this call so the session is decoded before
    the tracing middleware runs.
    """
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
