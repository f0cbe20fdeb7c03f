"""FastAPI application for the SolarPay referrals service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.sessions import SessionMiddleware

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.referrals_service.routers import (
    admin_router,
    auth_router,
    dashboard_router,
    password_reset_router,
    profile_router,
    referrals_router,
)


def create_app() -> FastAPI:
    """Create and configure the referrals service FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="SolarPay Referrals Service",
        version="0.1.0",
        description="Referral tracking for SolarPay referrers and admins.",
    )

    # Default per-caller limit everywhere, stricter ones via @auth_limit
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Signed cookie holding the auth session and the recovery slot
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.SESSION_HTTPS_ONLY,
    )

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "referrals"}

    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(referrals_router)
    app.include_router(profile_router)
    app.include_router(admin_router)
    app.include_router(password_reset_router)

    return app


app = create_app()
