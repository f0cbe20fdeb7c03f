"""Request throttling for the referrals service.

Signed-in callers are counted per user, everyone else per client address.
Storage is in-process memory unless RATE_LIMIT_STORAGE_URI points at a shared
backend such as Redis.
"""

from typing import Callable

from fastapi import Request, Response, status
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.notifications import Notification
from libs.common.supabase import AUTH_STORAGE_KEY

logger = get_logger(__name__)

DEFAULT_LIMIT = "100/minute"
AUTH_LIMIT = "5/minute"


def client_address(request: Request) -> str:
    # First hop of X-Forwarded-For is the browser when behind a proxy
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def caller_key(request: Request) -> str:
    session = request.scope.get("session") or {}
    user = AuthUser.from_stored_session(session.get(AUTH_STORAGE_KEY))
    if user:
        return f"user:{user.id}"
    return f"ip:{client_address(request)}"


limiter = Limiter(
    key_func=caller_key,
    default_limits=[DEFAULT_LIMIT],
    storage_uri=get_settings().RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 with the same notification shape as other failed actions."""
    logger.warning(
        "Rate limit exceeded",
        extra={"extra_fields": {"limit": str(exc.detail), "key": caller_key(request)}},
    )
    notification = Notification(
        title="Too many attempts",
        description="Please wait a minute before trying again.",
        variant="destructive",
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": f"Rate limit exceeded: {exc.detail}",
            "code": "RATE_LIMIT_EXCEEDED",
            "notifications": [notification.model_dump()],
        },
        headers={"Retry-After": "60"},
    )


def auth_limit(func: Callable) -> Callable:
    """Throttle credential and recovery endpoints.

    The decorated endpoint must accept ``request: Request``.
    """
    return limiter.limit(AUTH_LIMIT, key_func=client_address)(func)
