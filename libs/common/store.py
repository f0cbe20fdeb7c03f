"""Execution helper for PostgREST queries built on a supabase client."""

import asyncio
from typing import Any

from postgrest.exceptions import APIError

from libs.common.errors import StoreError
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def execute(query: Any) -> list[dict[str, Any]]:
    """
    Run a query builder in a worker thread and return its rows.

    Raises StoreError carrying the store's own message when the request is
    rejected (constraint violation, policy denial, invalid enum value).
    """
    try:
        response = await asyncio.to_thread(query.execute)
    except APIError as exc:
        logger.error(
            "Store query failed",
            extra={"extra_fields": {"code": exc.code, "error": exc.message}},
        )
        raise StoreError(exc.message or str(exc), exc.code) from exc

    data = response.data
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return data
