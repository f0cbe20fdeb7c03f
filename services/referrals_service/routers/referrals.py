"""Referrer routes: the caller's own referrals."""

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from libs.auth.context import AuthContext
from libs.auth.dependencies import get_notifier, get_supabase, require_user
from libs.common.notifications import Notifier
from services.referrals_service.routers._helpers import to_referrals
from services.referrals_service.schemas import (
    ReferralContactUpdate,
    ReferralCreate,
    ReferralListResponse,
)
from services.referrals_service.services import referral_store

router = APIRouter(prefix="/referrals", tags=["referrals"])


async def _own_referrals(
    client: Client, context: AuthContext, notifier: Notifier
) -> ReferralListResponse:
    rows = await referral_store.list_user_referrals(client, context.user.id)
    return ReferralListResponse(
        referrals=to_referrals(rows), total=len(rows), notifications=notifier.as_list()
    )


@router.get("", response_model=ReferralListResponse)
async def list_my_referrals(
    context: AuthContext = Depends(require_user),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    return await _own_referrals(client, context, notifier)


@router.post(
    "", response_model=ReferralListResponse, status_code=status.HTTP_201_CREATED
)
async def add_referral(
    payload: ReferralCreate,
    context: AuthContext = Depends(require_user),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Record a new lead for the caller.

    Stage and bonus status are left to the table defaults
    (Referred Connection / Pending).
    """
    fields = payload.model_dump(mode="json", exclude_none=True)
    await referral_store.create_referral(client, context.user.id, fields)
    notifier.success("Success", "Referral added successfully")
    return await _own_referrals(client, context, notifier)


@router.patch("/{referral_id}", response_model=ReferralListResponse)
async def update_my_referral(
    referral_id: str,
    payload: ReferralContactUpdate,
    context: AuthContext = Depends(require_user),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """Correct the client contact details on one of the caller's referrals."""
    changes = payload.model_dump(mode="json", exclude_unset=True)
    updated = await referral_store.update_referral(
        client, referral_id, changes, owner_id=context.user.id
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Referral not found")
    notifier.success("Success", "Referral updated successfully")
    return await _own_referrals(client, context, notifier)
