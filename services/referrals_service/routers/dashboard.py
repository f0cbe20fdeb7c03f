"""Main page: admins get the admin panel, everyone else the referrer dashboard."""

from fastapi import APIRouter, Depends
from supabase import Client

from libs.auth.context import AuthContext
from libs.auth.dependencies import get_notifier, get_supabase, require_user
from libs.auth.models import AppRole
from libs.common.notifications import Notifier
from services.referrals_service.routers._helpers import to_referrals
from services.referrals_service.routers.admin import load_admin_panel
from services.referrals_service.schemas import (
    AdminPanelView,
    ProfileResponse,
    ReferrerDashboardView,
)
from services.referrals_service.services import profile_store, referral_store

router = APIRouter(tags=["dashboard"])


async def load_referrer_dashboard(
    client: Client, context: AuthContext, notifier: Notifier
) -> ReferrerDashboardView:
    user_id = context.user.id
    rows = await referral_store.list_user_referrals(client, user_id)
    profile = await profile_store.get_profile(client, user_id)
    return ReferrerDashboardView(
        user=context.user,
        role=context.role,
        referrals=to_referrals(rows),
        total_referrals=len(rows),
        profile=ProfileResponse.model_validate(profile) if profile else None,
        notifications=notifier.as_list(),
    )


@router.get("/", response_model=AdminPanelView | ReferrerDashboardView)
async def dashboard(
    context: AuthContext = Depends(require_user),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """Render the view matching the caller's role."""
    if context.role == AppRole.ADMIN:
        return await load_admin_panel(client, context, notifier)
    return await load_referrer_dashboard(client, context, notifier)
