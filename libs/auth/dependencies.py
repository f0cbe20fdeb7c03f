from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from supabase import Client

from libs.auth.context import AuthContext
from libs.auth.models import AppRole, AuthState, AuthUser
from libs.auth.platform import RequestPlatform
from libs.auth.provider import AuthProvider
from libs.auth.roles import fetch_role
from libs.common.errors import SignInRequired
from libs.common.logging import get_logger
from libs.common.notifications import Notifier
from libs.common.supabase import SessionStorage, get_supabase_client

logger = get_logger(__name__)


def get_supabase(request: Request) -> Client:
    """
    Per-request supabase client whose auth session lives in the session cookie.
    """
    return get_supabase_client(storage=SessionStorage(request.session))


def get_platform(request: Request) -> RequestPlatform:
    platform = getattr(request.state, "platform", None)
    if platform is None:
        platform = RequestPlatform(request)
        request.state.platform = platform
    return platform


def get_notifier(request: Request) -> Notifier:
    notifier = getattr(request.state, "notifier", None)
    if notifier is None:
        notifier = Notifier()
        request.state.notifier = notifier
    return notifier


def _log_state_change(state: AuthState) -> None:
    logger.info(
        "Auth state changed",
        extra={"extra_fields": {
            "event": state.event,
            "user_id": state.user.id if state.user else None,
            "role": state.role.value if state.role else None,
        }},
    )


async def get_auth_context(
    client: Annotated[Client, Depends(get_supabase)],
    platform: Annotated[RequestPlatform, Depends(get_platform)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> AsyncGenerator[AuthContext, None]:
    """
    Yield a started AuthContext for the request and release its
    provider subscription afterwards.
    """

    async def resolve_role(user: AuthUser):
        return await fetch_role(client, user.id)

    context = AuthContext(
        provider=AuthProvider(client),
        platform=platform,
        notifier=notifier,
        resolve_role=resolve_role,
    )
    context.subscribe(_log_state_change)
    await context.start()
    try:
        yield context
    finally:
        context.close()


async def require_user(
    context: Annotated[AuthContext, Depends(get_auth_context)]
) -> AuthContext:
    """
    Ensure the request carries a signed-in (non-recovery) session.
    """
    if context.loading or context.user is None:
        raise SignInRequired()
    return context


async def require_admin(
    context: Annotated[AuthContext, Depends(require_user)]
) -> AuthContext:
    """
    Ensure the signed-in user holds the admin role.

    Row-level policies enforce the same rule in the database; this only
    keeps non-admins from reaching admin views.
    """
    if context.role != AppRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return context
