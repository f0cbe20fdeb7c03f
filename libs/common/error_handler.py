"""Global exception handlers for consistent error responses.

Usage:
    from libs.common.error_handler import add_exception_handlers

    app = FastAPI()
    add_exception_handlers(app)
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from libs.common.errors import SignInRequired, StoreError
from libs.common.logging import get_logger, get_request_id
from libs.common.middleware import REQUEST_ID_HEADER
from libs.common.notifications import Notification

logger = get_logger(__name__)


async def store_error_handler(request: Request, exc: StoreError) -> Response:
    """Surface store errors verbatim as a destructive notification."""
    status_code = (
        status.HTTP_403_FORBIDDEN
        if exc.is_policy_violation
        else status.HTTP_400_BAD_REQUEST
    )
    logger.warning(
        "Store request rejected",
        extra={"extra_fields": {"code": exc.code, "error": exc.message}},
    )
    notification = Notification(
        title="Error", description=exc.message, variant="destructive"
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "code": exc.code,
            "notifications": [notification.model_dump()],
        },
    )


async def sign_in_required_handler(request: Request, exc: SignInRequired) -> Response:
    """Send page loads to the sign-in view; reject other methods with 401."""
    if request.method == "GET":
        return RedirectResponse(exc.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Sign in required", "redirect_to": exc.redirect_to},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    # Runs outside the tracing middleware, whose log context is already cleared
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    logger.exception(
        "Unhandled exception",
        extra={"extra_fields": {"error": str(exc), "request_id": request_id}},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Something went wrong. Please try again.",
            "request_id": request_id,
        },
        headers={REQUEST_ID_HEADER: request_id} if request_id else None,
    )


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(SignInRequired, sign_in_required_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
