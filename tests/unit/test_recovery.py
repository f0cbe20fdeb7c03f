"""Unit tests for recovery-link detection and the recovery session slot."""

import pytest

from libs.auth.models import AuthSession, AuthUser
from libs.auth.recovery import (
    RecoverySessionStore,
    is_recovery_callback,
    reset_password_url,
)
from tests.fakes import MemoryPlatform


@pytest.mark.unit
@pytest.mark.parametrize(
    "params",
    [
        {"type": "recovery"},
        {"access_token": "a"},
        {"refresh_token": "r"},
        {"token_hash": "h", "type": "recovery"},
    ],
)
def test_recovery_parameters_are_detected(params):
    assert is_recovery_callback(params)


@pytest.mark.unit
@pytest.mark.parametrize(
    "params",
    [{}, {"type": "signup", "token_hash": "h"}, {"code": "c"}, {"access_token": ""}],
)
def test_other_parameters_are_not_recovery(params):
    assert not is_recovery_callback(params)


@pytest.mark.unit
def test_reset_password_url_keeps_query():
    assert reset_password_url("type=recovery&token_hash=x") == (
        "/reset-password?type=recovery&token_hash=x"
    )
    assert reset_password_url("") == "/reset-password"


@pytest.mark.unit
def test_store_saves_loads_and_clears():
    platform = MemoryPlatform()
    store = RecoverySessionStore(platform)
    session = AuthSession(
        access_token="access",
        refresh_token="refresh",
        user=AuthUser(id="user-1", email="a@example.com"),
    )

    store.save(session)
    assert "recovery_session" in platform.storage

    loaded = store.load()
    assert loaded.access_token == "access"
    assert loaded.refresh_token == "refresh"
    assert loaded.user.id == "user-1"

    store.clear()
    assert store.load() is None


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["{not json", "[]", '{"refresh_token": "r"}'])
def test_store_ignores_unreadable_sessions(raw):
    platform = MemoryPlatform()
    platform.storage["recovery_session"] = raw

    assert RecoverySessionStore(platform).load() is None
