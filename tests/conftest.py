from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from libs.auth.context import AuthContext
from libs.auth.dependencies import get_supabase
from libs.auth.provider import AuthProvider
from libs.auth.roles import fetch_role
from libs.common.notifications import Notifier
from libs.common.rate_limit import limiter
from services.referrals_service.app.main import create_app
from tests.fakes import FakeSupabase, MemoryPlatform

DEFAULT_PASSWORD = "secret-password"


@pytest.fixture(autouse=True)
def disable_rate_limits():
    limiter.enabled = False
    yield
    limiter.reset()
    limiter.enabled = True


@pytest.fixture
def backend() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def referrer(backend) -> dict:
    email = "referrer@example.com"
    user_id = backend.create_account(email, DEFAULT_PASSWORD, name="Riley Referrer")
    return {"id": user_id, "email": email, "password": DEFAULT_PASSWORD}


@pytest.fixture
def admin(backend) -> dict:
    email = "admin@example.com"
    user_id = backend.create_account(email, DEFAULT_PASSWORD, name="Ada Admin", role="admin")
    return {"id": user_id, "email": email, "password": DEFAULT_PASSWORD}


@pytest.fixture
def app(backend) -> FastAPI:
    """
    The service app with every request's supabase client replaced by a
    client of the in-memory backend, persisting into the session cookie.
    """
    application = create_app()

    def _fake_supabase(request: Request):
        return backend.client(request.session)

    application.dependency_overrides[get_supabase] = _fake_supabase
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


async def sign_in(client: AsyncClient, account: dict) -> dict:
    response = await client.post(
        "/auth/sign-in",
        json={"email": account["email"], "password": account["password"]},
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest_asyncio.fixture
async def referrer_client(client, referrer) -> AsyncClient:
    await sign_in(client, referrer)
    return client


@pytest_asyncio.fixture
async def admin_client(client, admin) -> AsyncClient:
    await sign_in(client, admin)
    return client


# ---------------------------------------------------------------------------
# AuthContext wiring without HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


def build_context(
    backend: FakeSupabase,
    platform: MemoryPlatform,
    notifier: Notifier,
) -> tuple[AuthContext, object]:
    """
    An AuthContext whose provider persists into the platform's storage, like
    the request session in the app.
    """
    supabase = backend.client(platform.storage)

    async def resolve_role(user):
        return await fetch_role(supabase, user.id)

    context = AuthContext(
        provider=AuthProvider(supabase),
        platform=platform,
        notifier=notifier,
        resolve_role=resolve_role,
    )
    return context, supabase


@pytest_asyncio.fixture
async def make_context(backend, notifier):
    """Factory for started contexts; closes them at teardown."""
    contexts: list[AuthContext] = []

    async def _make(
        query: Optional[dict] = None, platform: Optional[MemoryPlatform] = None
    ) -> tuple[AuthContext, MemoryPlatform]:
        platform = platform or MemoryPlatform(query)
        context, _ = build_context(backend, platform, notifier)
        await context.start()
        contexts.append(context)
        return context, platform

    yield _make

    for context in contexts:
        context.close()
