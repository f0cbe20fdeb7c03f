"""Role lookup against the user_roles table."""

from typing import Optional

from supabase import Client

from libs.auth.models import AppRole
from libs.common.errors import StoreError
from libs.common.logging import get_logger
from libs.common.store import execute

logger = get_logger(__name__)


async def fetch_role(client: Client, user_id: str) -> Optional[AppRole]:
    """
    Return the caller's role, or None when no role row is visible.

    A user may in principle hold several rows; admin wins over referrer.
    """
    try:
        rows = await execute(
            client.table("user_roles").select("role").eq("user_id", user_id)
        )
    except StoreError as exc:
        logger.error(
            "Error fetching user role",
            extra={"extra_fields": {"user_id": user_id, "error": exc.message}},
        )
        return None

    roles = {row.get("role") for row in rows}
    if AppRole.ADMIN.value in roles:
        return AppRole.ADMIN
    if AppRole.REFERRER.value in roles:
        return AppRole.REFERRER
    return None
