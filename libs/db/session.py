import json
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from libs.db.config import get_session_factory


@asynccontextmanager
async def db_session() -> AsyncIterator[AsyncSession]:
    """Yield a session that commits on success and rolls back on error."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def act_as(session: AsyncSession, user_id: Optional[str]) -> None:
    """
    Switch the current transaction to the role PostgREST would use for
    ``user_id`` (``anon`` when None), so row-level policies apply.
    """
    claims = {"sub": user_id, "role": "authenticated"} if user_id else {}
    await session.execute(
        text("SELECT set_config('request.jwt.claims', :claims, true)"),
        {"claims": json.dumps(claims)},
    )
    role = "authenticated" if user_id else "anon"
    await session.execute(text(f"SET LOCAL ROLE {role}"))
