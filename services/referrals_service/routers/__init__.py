"""Referrals service routers package."""

from services.referrals_service.routers.admin import router as admin_router
from services.referrals_service.routers.auth import router as auth_router
from services.referrals_service.routers.dashboard import router as dashboard_router
from services.referrals_service.routers.password_reset import (
    router as password_reset_router,
)
from services.referrals_service.routers.profile import router as profile_router
from services.referrals_service.routers.referrals import router as referrals_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "referrals_router",
    "profile_router",
    "admin_router",
    "password_reset_router",
]
