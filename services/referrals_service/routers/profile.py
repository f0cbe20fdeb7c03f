"""Profile routes for the signed-in referrer."""

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from libs.auth.context import AuthContext
from libs.auth.dependencies import get_notifier, get_supabase, require_user
from libs.common.notifications import Notifier
from services.referrals_service.schemas import (
    PaymentProfileUpdate,
    ProfileResponse,
    ProfileView,
)
from services.referrals_service.services import profile_store

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileView)
async def get_my_profile(
    context: AuthContext = Depends(require_user),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    profile = await profile_store.get_profile(client, context.user.id)
    return ProfileView(
        profile=ProfileResponse.model_validate(profile) if profile else None,
        notifications=notifier.as_list(),
    )


@router.put("/payment", response_model=ProfileView)
async def update_payment_method(
    payload: PaymentProfileUpdate,
    context: AuthContext = Depends(require_user),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """Save the caller's payout method and its details."""
    profile = await profile_store.update_payment_method(
        client,
        context.user.id,
        payload.payment_method.value,
        payload.payment_details,
    )
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    notifier.success("Success", "Payment method updated successfully")
    return ProfileView(
        profile=ProfileResponse.model_validate(profile),
        notifications=notifier.as_list(),
    )
