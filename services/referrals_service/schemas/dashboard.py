"""View-models for the role-branched main page."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from libs.auth.models import AppRole, AuthUser
from libs.common.notifications import Notification
from services.referrals_service.schemas.profile import (
    AdminUserResponse,
    ProfileResponse,
)
from services.referrals_service.schemas.referral import ReferralResponse


class ReferrerDashboardView(BaseModel):
    view: Literal["referrer"] = "referrer"
    user: AuthUser
    role: Optional[AppRole] = None
    referrals: list[ReferralResponse]
    total_referrals: int
    profile: Optional[ProfileResponse] = None
    notifications: list[Notification] = Field(default_factory=list)


class AdminPanelView(BaseModel):
    view: Literal["admin"] = "admin"
    user: AuthUser
    role: AppRole = AppRole.ADMIN
    referrals: list[ReferralResponse]
    users: list[AdminUserResponse]
    total_referrals: int
    total_users: int
    notifications: list[Notification] = Field(default_factory=list)
