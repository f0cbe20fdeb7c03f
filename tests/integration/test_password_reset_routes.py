"""Integration tests for the password-recovery flow.

A recovery link must never leave its opener signed in: the callback parks
the session, and only the reset-password form uses it.
"""

import pytest

from tests.conftest import sign_in

INVALID_LINK = "Invalid or expired reset link. Please request a new password reset."


def _calls(backend, name):
    return [payload for call, payload in backend.calls if call == name]


async def _open_recovery_link(client, backend, email) -> str:
    query = backend.recovery_link_query(email)
    response = await client.get(f"/auth/callback?{query}")
    assert response.status_code == 303
    assert response.headers["location"] == f"/reset-password?{query}"
    return query


# ---------------------------------------------------------------------------
# Landing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_recovery_callback_leaves_no_session(client, backend, referrer):
    await _open_recovery_link(client, backend, referrer["email"])

    response = await client.get("/")

    assert response.status_code == 303
    assert response.headers["location"] == "/auth"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_recovery_callback_signs_out_existing_session(
    referrer_client, backend, referrer
):
    await _open_recovery_link(referrer_client, backend, referrer["email"])

    response = await referrer_client.get("/")

    assert response.status_code == 303


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_view_after_callback_is_valid(client, backend, referrer):
    query = await _open_recovery_link(client, backend, referrer["email"])

    first = await client.get(f"/reset-password?{query}")
    again = await client.get(f"/reset-password?{query}")

    assert first.json()["link_valid"] is True
    assert again.json()["link_valid"] is True
    assert _calls(backend, "verify_otp") == ["recovery"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_view_can_be_the_link_target(client, backend, referrer):
    query = backend.recovery_link_query(referrer["email"])

    response = await client.get(f"/reset-password?{query}")

    assert response.status_code == 200
    assert response.json()["link_valid"] is True
    assert (await client.get("/")).status_code == 303


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_view_with_used_link(client):
    response = await client.get("/reset-password?token_hash=used&type=recovery")

    data = response.json()
    assert data["link_valid"] is False
    assert data["error"] == "Email link is invalid or has expired"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_view_without_link_parameters(client):
    response = await client.get("/reset-password")

    assert response.status_code == 200
    assert response.json() == {
        "view": "reset_password",
        "link_valid": False,
        "error": INVALID_LINK,
        "notifications": [],
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_view_redirects_signed_in_user(referrer_client):
    response = await referrer_client.get("/reset-password")

    assert response.status_code == 303
    assert response.headers["location"] == "/"


# ---------------------------------------------------------------------------
# Submitting a new password
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_mismatched_passwords_rejected_before_provider(client, backend, referrer):
    query = await _open_recovery_link(client, backend, referrer["email"])

    response = await client.post(
        f"/reset-password?{query}",
        json={"password": "new-password-1", "confirm_password": "new-password-2"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Passwords do not match"
    assert _calls(backend, "update_user") == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_short_password_rejected_before_provider(client, backend, referrer):
    query = await _open_recovery_link(client, backend, referrer["email"])

    response = await client.post(
        f"/reset-password?{query}", json={"password": "abc", "confirm_password": "abc"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Password must be at least 6 characters long"
    assert _calls(backend, "update_user") == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_submit_without_recovery_link(client):
    response = await client.post(
        "/reset-password",
        json={"password": "new-password", "confirm_password": "new-password"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == INVALID_LINK


@pytest.mark.asyncio
@pytest.mark.integration
async def test_successful_reset_signs_out_and_redirects(client, backend, referrer):
    query = await _open_recovery_link(client, backend, referrer["email"])

    response = await client.post(
        f"/reset-password?{query}",
        json={"password": "brand-new-password", "confirm_password": "brand-new-password"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["success"] is True
    assert data["redirect_to"] == "/auth"
    assert data["redirect_delay_seconds"] == 3
    assert response.headers["refresh"] == "3; url=/auth"
    assert (await client.get("/")).status_code == 303

    old = await client.post(
        "/auth/sign-in",
        json={"email": referrer["email"], "password": referrer["password"]},
    )
    assert old.status_code == 400
    await sign_in(client, {**referrer, "password": "brand-new-password"})


@pytest.mark.asyncio
@pytest.mark.integration
async def test_provider_rejection_is_reported(client, backend, referrer):
    query = await _open_recovery_link(client, backend, referrer["email"])
    backend.fail_password_update = "Password is known to be weak and easy to guess"

    response = await client.post(
        f"/reset-password?{query}",
        json={"password": "password1", "confirm_password": "password1"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Password is known to be weak and easy to guess"

    # The parked session was used up.
    retry = await client.post(
        f"/reset-password?{query}",
        json={"password": "password1", "confirm_password": "password1"},
    )
    assert retry.json()["error"] == "No valid session found for password reset"
