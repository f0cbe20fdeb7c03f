"""Sign-in / sign-up routes and the email-link landing."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from libs.auth.context import AuthContext
from libs.auth.dependencies import get_auth_context, get_notifier, get_platform
from libs.auth.models import AuthOutcome
from libs.auth.platform import RequestPlatform
from libs.auth.recovery import reset_password_url
from libs.common.logging import get_logger
from libs.common.notifications import Notifier
from libs.common.rate_limit import auth_limit
from services.referrals_service.routers._helpers import error_response
from services.referrals_service.schemas import (
    AuthActionResponse,
    ForgotPasswordRequest,
    SignInRequest,
    SignInView,
    SignUpRequest,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _action_response(outcome: AuthOutcome, context: AuthContext, notifier: Notifier):
    body = AuthActionResponse(
        ok=outcome.ok,
        error=outcome.error,
        user=context.user,
        role=context.role,
        notifications=notifier.as_list(),
    )
    if not outcome.ok:
        return error_response(body)
    return body


@router.get("", response_model=SignInView)
async def sign_in_view(
    context: AuthContext = Depends(get_auth_context),
    notifier: Notifier = Depends(get_notifier),
):
    """Sign-in page; signed-in users go straight to the dashboard."""
    if context.user:
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    return SignInView(notifications=notifier.as_list())


@router.post("/sign-up", response_model=AuthActionResponse)
@auth_limit
async def sign_up(
    request: Request,
    payload: SignUpRequest,
    context: AuthContext = Depends(get_auth_context),
    notifier: Notifier = Depends(get_notifier),
):
    outcome = await context.sign_up(payload.email, payload.password, payload.name)
    return _action_response(outcome, context, notifier)


@router.post("/sign-in", response_model=AuthActionResponse)
@auth_limit
async def sign_in(
    request: Request,
    payload: SignInRequest,
    context: AuthContext = Depends(get_auth_context),
    notifier: Notifier = Depends(get_notifier),
):
    outcome = await context.sign_in(payload.email, payload.password)
    return _action_response(outcome, context, notifier)


@router.post("/sign-out", response_model=AuthActionResponse)
async def sign_out(
    context: AuthContext = Depends(get_auth_context),
    notifier: Notifier = Depends(get_notifier),
):
    outcome = await context.sign_out()
    return _action_response(outcome, context, notifier)


@router.post("/forgot-password", response_model=AuthActionResponse)
@auth_limit
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    context: AuthContext = Depends(get_auth_context),
    notifier: Notifier = Depends(get_notifier),
):
    outcome = await context.reset_password(payload.email)
    return _action_response(outcome, context, notifier)


@router.get("/callback")
async def auth_callback(
    context: AuthContext = Depends(get_auth_context),
    platform: RequestPlatform = Depends(get_platform),
):
    """
    Landing point for links in confirmation and password-recovery emails.

    Recovery links never end signed in: the context parks their session and
    sends the browser to the reset-password view.
    """
    outcome = await context.complete_callback()

    if platform.redirect_to:
        target = platform.redirect_to
    elif context.is_recovery_flow:
        target = reset_password_url(platform.query_string())
    elif outcome.ok and context.user:
        target = "/"
    else:
        target = "/auth"

    logger.info(
        "Auth callback handled",
        extra={"extra_fields": {
            "recovery": context.is_recovery_flow,
            "ok": outcome.ok,
            "target": target.split("?", 1)[0],
        }},
    )
    return RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
