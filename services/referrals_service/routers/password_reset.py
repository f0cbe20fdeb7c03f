"""Reset-password view reached from a password-recovery email link."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from libs.auth.context import AuthContext
from libs.auth.dependencies import get_auth_context, get_notifier, get_platform
from libs.auth.platform import RequestPlatform
from libs.auth.recovery import RecoverySessionStore
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.notifications import Notifier
from libs.common.rate_limit import auth_limit
from services.referrals_service.routers._helpers import error_response
from services.referrals_service.schemas import (
    PasswordResetRequest,
    ResetPasswordResult,
    ResetPasswordView,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/reset-password", tags=["password-reset"])

INVALID_LINK_MESSAGE = (
    "Invalid or expired reset link. Please request a new password reset."
)
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"
UPDATE_FAILED_MESSAGE = "Failed to update password"
SIGN_IN_PATH = "/auth"


def _password_error(payload: PasswordResetRequest, min_length: int):
    if payload.password != payload.confirm_password:
        return PASSWORD_MISMATCH_MESSAGE
    if len(payload.password) < min_length:
        return f"Password must be at least {min_length} characters long"
    return None


@router.get("", response_model=ResetPasswordView)
async def reset_password_view(
    context: AuthContext = Depends(get_auth_context),
    platform: RequestPlatform = Depends(get_platform),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Show the new-password form for a recovery link.

    A first visit with the link's parameters establishes the recovery
    session, which the auth context parks instead of signing the user in.
    """
    if not context.is_recovery_flow:
        if context.user:
            return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
        return ResetPasswordView(
            link_valid=False,
            error=INVALID_LINK_MESSAGE,
            notifications=notifier.as_list(),
        )

    if RecoverySessionStore(platform).load() is None:
        outcome = await context.complete_callback()
        if not outcome.ok:
            return ResetPasswordView(
                link_valid=False,
                error=outcome.error,
                notifications=notifier.as_list(),
            )

    return ResetPasswordView(link_valid=True, notifications=notifier.as_list())


@router.post("", response_model=ResetPasswordResult)
@auth_limit
async def submit_new_password(
    request: Request,
    response: Response,
    payload: PasswordResetRequest,
    context: AuthContext = Depends(get_auth_context),
    notifier: Notifier = Depends(get_notifier),
):
    """Set the new password, then sign out so the user logs in with it."""
    settings = get_settings()

    if not context.is_recovery_flow:
        return error_response(
            ResetPasswordResult(
                success=False,
                error=INVALID_LINK_MESSAGE,
                notifications=notifier.as_list(),
            )
        )

    problem = _password_error(payload, settings.PASSWORD_MIN_LENGTH)
    if problem:
        return error_response(
            ResetPasswordResult(
                success=False, error=problem, notifications=notifier.as_list()
            )
        )

    outcome = await context.update_password(payload.password)
    if not outcome.ok:
        return error_response(
            ResetPasswordResult(
                success=False,
                error=outcome.error or UPDATE_FAILED_MESSAGE,
                notifications=notifier.as_list(),
            )
        )

    await context.sign_out()
    delay = settings.RESET_REDIRECT_DELAY_SECONDS
    response.headers["Refresh"] = f"{delay}; url={SIGN_IN_PATH}"
    logger.info("Password reset completed")
    return ResetPasswordResult(
        success=True,
        redirect_to=SIGN_IN_PATH,
        redirect_delay_seconds=delay,
        notifications=notifier.as_list(),
    )
