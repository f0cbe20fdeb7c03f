"""Health check, request tracing and throttling."""

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.responses import RedirectResponse

from libs.common.middleware import _outcome_fields
from libs.common.rate_limit import limiter
from tests.conftest import sign_in


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "referrals"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_id_is_generated(client):
    response = await client.get("/health")

    assert len(response.headers["X-Request-ID"]) == 32


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_id_is_propagated(client):
    response = await client.get("/health", headers={"X-Request-ID": "trace-123"})

    assert response.headers["X-Request-ID"] == "trace-123"


@pytest.mark.unit
def test_logged_redirect_drops_query_string():
    response = RedirectResponse("/reset-password?token_hash=secret&type=recovery")

    fields = _outcome_fields(response, 0.0125)

    assert fields == {
        "status_code": 307,
        "duration_ms": 12.5,
        "redirect_to": "/reset-password",
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sign_in_is_throttled(client, referrer):
    limiter.enabled = True
    payload = {"email": referrer["email"], "password": "wrong"}

    statuses = [
        (await client.post("/auth/sign-in", json=payload)).status_code
        for _ in range(6)
    ]

    assert statuses[:5] == [400] * 5
    assert statuses[5] == 429


@pytest.mark.asyncio
@pytest.mark.integration
async def test_throttled_response_carries_notification(client, referrer):
    limiter.enabled = True
    payload = {"email": referrer["email"], "password": "wrong"}
    for _ in range(5):
        await client.post("/auth/sign-in", json=payload)

    response = await client.post("/auth/sign-in", json=payload)

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    data = response.json()
    assert data["code"] == "RATE_LIMIT_EXCEEDED"
    assert data["notifications"][0]["variant"] == "destructive"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_default_limit_applies_to_undecorated_routes(referrer_client):
    limiter.enabled = True

    for _ in range(100):
        assert (await referrer_client.get("/referrals")).status_code == 200
    response = await referrer_client.get("/referrals")

    assert response.status_code == 429
    assert response.json()["code"] == "RATE_LIMIT_EXCEEDED"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_default_limit_is_counted_per_user(client, backend, referrer, admin):
    limiter.enabled = True
    await sign_in(client, admin)
    for _ in range(99):
        await client.get("/admin/users")

    await client.post("/auth/sign-out")
    await sign_in(client, referrer)
    response = await client.get("/referrals")

    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unhandled_error_reports_request_id(app):
    async def explode():
        raise RuntimeError("boom")

    app.add_api_route("/explode", explode)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/explode", headers={"X-Request-ID": "trace-500"})

    assert response.status_code == 500
    assert response.json()["request_id"] == "trace-500"
    assert response.headers["X-Request-ID"] == "trace-500"
