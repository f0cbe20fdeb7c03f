"""Profile and role queries."""

from typing import Any, Optional

from supabase import Client

from libs.auth.models import AppRole
from libs.common.logging import get_logger
from libs.common.store import execute
from services.referrals_service.models import PROFILES_TABLE, USER_ROLES_TABLE

logger = get_logger(__name__)


async def get_profile(client: Client, user_id: str) -> Optional[dict[str, Any]]:
    rows = await execute(
        client.table(PROFILES_TABLE).select("*").eq("user_id", user_id).limit(1)
    )
    return rows[0] if rows else None


async def list_profiles(client: Client) -> list[dict[str, Any]]:
    return await execute(
        client.table(PROFILES_TABLE).select("*").order("created_at", desc=True)
    )


async def update_payment_method(
    client: Client, user_id: str, method: str, details: dict[str, Any]
) -> Optional[dict[str, Any]]:
    rows = await execute(
        client.table(PROFILES_TABLE)
        .update({"payment_method": method, "payment_details": details})
        .eq("user_id", user_id)
    )
    logger.info(
        "Payment method updated",
        extra={"extra_fields": {"user_id": user_id, "payment_method": method}},
    )
    return rows[0] if rows else None


async def list_roles(client: Client) -> dict[str, AppRole]:
    """Map user id to role for every role row visible to the caller."""
    rows = await execute(client.table(USER_ROLES_TABLE).select("user_id, role"))
    roles: dict[str, AppRole] = {}
    for row in rows:
        key = str(row["user_id"])
        role = AppRole(row["role"])
        if roles.get(key) != AppRole.ADMIN:
            roles[key] = role
    return roles


async def set_role(client: Client, user_id: str, role: AppRole) -> None:
    """
    Replace a user's role rows with a single row. Only admins pass the
    user_roles write policy.
    """
    await execute(
        client.table(USER_ROLES_TABLE).delete().eq("user_id", user_id).neq("role", role.value)
    )
    await execute(
        client.table(USER_ROLES_TABLE).upsert(
            {"user_id": user_id, "role": role.value}, on_conflict="user_id,role"
        )
    )
    logger.info(
        "Role assigned",
        extra={"extra_fields": {"user_id": user_id, "role": role.value}},
    )
