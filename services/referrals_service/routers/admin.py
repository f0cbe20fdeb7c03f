"""Admin panel routes: every referral, every user."""

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from libs.auth.context import AuthContext
from libs.auth.dependencies import get_notifier, get_supabase, require_admin
from libs.common.logging import get_logger
from libs.common.notifications import Notifier
from services.referrals_service.routers._helpers import to_referrals
from services.referrals_service.schemas import (
    AdminPanelView,
    AdminReferralCreate,
    AdminUserListResponse,
    AdminUserResponse,
    ReferralListResponse,
    ReferralStatusUpdate,
    RoleUpdate,
)
from services.referrals_service.services import profile_store, referral_store

logger = get_logger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


async def _load_referrals(client: Client, profiles: list[dict]) -> list[dict]:
    rows = await referral_store.list_all_referrals(client)
    return referral_store.attach_referrer_names(rows, profiles)


async def _load_users(
    client: Client, profiles: list[dict], referrals: list[dict]
) -> list[AdminUserResponse]:
    roles = await profile_store.list_roles(client)
    counts = referral_store.count_by_user(referrals)
    return [
        AdminUserResponse.model_validate(
            {
                **profile,
                "role": roles.get(str(profile["user_id"])),
                "referral_count": counts.get(str(profile["user_id"]), 0),
            }
        )
        for profile in profiles
    ]


async def _referral_list(client: Client, notifier: Notifier) -> ReferralListResponse:
    profiles = await profile_store.list_profiles(client)
    rows = await _load_referrals(client, profiles)
    return ReferralListResponse(
        referrals=to_referrals(rows), total=len(rows), notifications=notifier.as_list()
    )


async def load_admin_panel(
    client: Client, context: AuthContext, notifier: Notifier
) -> AdminPanelView:
    profiles = await profile_store.list_profiles(client)
    referrals = await _load_referrals(client, profiles)
    users = await _load_users(client, profiles, referrals)
    return AdminPanelView(
        user=context.user,
        referrals=to_referrals(referrals),
        users=users,
        total_referrals=len(referrals),
        total_users=len(users),
        notifications=notifier.as_list(),
    )


@router.get("/referrals", response_model=ReferralListResponse)
async def list_referrals(
    context: AuthContext = Depends(require_admin),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """All referrals with their referrer's name, newest first."""
    return await _referral_list(client, notifier)


@router.post(
    "/referrals",
    response_model=ReferralListResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_referral_for_user(
    payload: AdminReferralCreate,
    context: AuthContext = Depends(require_admin),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """Add a referral on behalf of any user."""
    fields = payload.model_dump(mode="json", exclude={"user_id"})
    await referral_store.create_referral(client, str(payload.user_id), fields)
    notifier.success("Success", "Referral added successfully")
    return await _referral_list(client, notifier)


@router.patch("/referrals/{referral_id}", response_model=ReferralListResponse)
async def update_referral_status(
    referral_id: str,
    payload: ReferralStatusUpdate,
    context: AuthContext = Depends(require_admin),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """Change a referral's stage, bonus status or notes."""
    changes = payload.model_dump(mode="json", exclude_unset=True)
    updated = await referral_store.update_referral(client, referral_id, changes)
    if not updated:
        raise HTTPException(status_code=404, detail="Referral not found")
    notifier.success("Success", "Referral updated successfully")
    return await _referral_list(client, notifier)


@router.get("/users", response_model=AdminUserListResponse)
async def list_users(
    context: AuthContext = Depends(require_admin),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """All profiles with their role and referral count."""
    profiles = await profile_store.list_profiles(client)
    referrals = await referral_store.list_all_referrals(client)
    users = await _load_users(client, profiles, referrals)
    return AdminUserListResponse(
        users=users, total=len(users), notifications=notifier.as_list()
    )


@router.put("/users/{user_id}/role", response_model=AdminUserListResponse)
async def set_user_role(
    user_id: str,
    payload: RoleUpdate,
    context: AuthContext = Depends(require_admin),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
):
    """Assign a role to a user."""
    if user_id == context.user.id and payload.role != context.role:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role",
        )
    await profile_store.set_role(client, user_id, payload.role)
    notifier.success("Success", f"Role updated to {payload.role.value}")

    profiles = await profile_store.list_profiles(client)
    referrals = await referral_store.list_all_referrals(client)
    users = await _load_users(client, profiles, referrals)
    return AdminUserListResponse(
        users=users, total=len(users), notifications=notifier.as_list()
    )
