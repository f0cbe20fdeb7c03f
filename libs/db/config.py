from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from libs.common.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """
    Async engine for direct SQL against the Supabase Postgres database.

    The web service never needs it; scripts and the row-level policy
    tests do.
    """
    settings = get_settings()
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not configured")

    # echo=True for local dev to see SQL queries
    return create_async_engine(
        settings.DATABASE_URL,
        echo=(settings.ENVIRONMENT == "local"),
        pool_pre_ping=True,  # Test connections before using
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(), class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
