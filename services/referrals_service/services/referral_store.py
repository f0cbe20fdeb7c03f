"""Referral queries.

Every call runs under the caller's access token, so the row-level policies
decide which rows are visible or writable. Listing "own" referrals still
filters on user_id so an admin's dashboard shows only their own leads.
"""

from typing import Any, Optional

from supabase import Client

from libs.common.logging import get_logger
from libs.common.store import execute
from services.referrals_service.models import REFERRALS_TABLE

logger = get_logger(__name__)

UNKNOWN_REFERRER = "Unknown User"


async def list_user_referrals(client: Client, user_id: str) -> list[dict[str, Any]]:
    """Return one user's referrals, newest first."""
    return await execute(
        client.table(REFERRALS_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
    )


async def list_all_referrals(client: Client) -> list[dict[str, Any]]:
    """Return every referral visible to the caller, newest first."""
    return await execute(
        client.table(REFERRALS_TABLE).select("*").order("created_at", desc=True)
    )


def attach_referrer_names(
    referrals: list[dict[str, Any]], profiles: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Join each referral with its referrer's display name."""
    names = {str(p["user_id"]): p.get("name") for p in profiles}
    return [
        {**referral, "referrer_name": names.get(str(referral["user_id"])) or UNKNOWN_REFERRER}
        for referral in referrals
    ]


def count_by_user(referrals: list[dict[str, Any]]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for referral in referrals:
        key = str(referral["user_id"])
        counts[key] = counts.get(key, 0) + 1
    return counts


async def create_referral(
    client: Client, user_id: str, fields: dict[str, Any]
) -> Optional[dict[str, Any]]:
    """Insert a referral owned by ``user_id``; stage and bonus use table defaults."""
    rows = await execute(
        client.table(REFERRALS_TABLE).insert({**fields, "user_id": user_id})
    )
    logger.info(
        "Referral created",
        extra={"extra_fields": {"user_id": user_id}},
    )
    return rows[0] if rows else None


async def update_referral(
    client: Client,
    referral_id: str,
    changes: dict[str, Any],
    owner_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    """
    Update one referral. ``owner_id`` narrows the update to the owner's row.

    Returns the updated rows; an empty list means no visible row matched.
    """
    query = client.table(REFERRALS_TABLE).update(changes).eq("id", referral_id)
    if owner_id is not None:
        query = query.eq("user_id", owner_id)
    rows = await execute(query)
    logger.info(
        "Referral updated",
        extra={"extra_fields": {
            "referral_id": referral_id,
            "fields": sorted(changes),
            "matched": len(rows),
        }},
    )
    return rows
