"""Async adapter over the Supabase auth client.

The supabase client is synchronous, so every call runs in a worker thread.
Provider errors are re-raised as ``AuthProviderError`` and provider sessions
are converted into ``AuthSession`` so callers never handle supabase types.
"""

import asyncio
from collections.abc import Mapping
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel
from supabase import Client
from supabase_auth.errors import AuthError

from libs.auth.models import AuthSession, AuthUser
from libs.common.errors import AuthProviderError
from libs.common.logging import get_logger

logger = get_logger(__name__)

AuthEventListener = Callable[[str, Optional[AuthSession]], None]
SignOutScope = Literal["global", "local", "others"]


class ProviderResponse(BaseModel):
    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None


def _dump(obj: Any) -> Optional[dict]:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return dict(obj)
    return obj.model_dump()


def to_auth_session(obj: Any) -> Optional[AuthSession]:
    data = _dump(obj)
    return AuthSession.model_validate(data) if data else None


def to_auth_user(obj: Any) -> Optional[AuthUser]:
    data = _dump(obj)
    return AuthUser.model_validate(data) if data else None


class AuthProvider:
    """Session and credential operations against Supabase Auth."""

    def __init__(self, client: Client):
        self._client = client

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except AuthError as exc:
            raise AuthProviderError(exc.message, getattr(exc, "status", None)) from exc

    def _response(self, response: Any) -> ProviderResponse:
        session = to_auth_session(getattr(response, "session", None))
        if session:
            self.bind_data_session(session)
        return ProviderResponse(
            user=to_auth_user(getattr(response, "user", None)),
            session=session,
        )

    def bind_data_session(self, session: AuthSession) -> None:
        """Send the session's access token with every data-store query."""
        self._client.postgrest.auth(session.access_token)

    async def sign_up(
        self, email: str, password: str, name: str, redirect_to: str
    ) -> ProviderResponse:
        credentials = {
            "email": email,
            "password": password,
            "options": {
                "email_redirect_to": redirect_to,
                "data": {"name": name},
            },
        }
        response = await self._call(self._client.auth.sign_up, credentials)
        logger.info("User signed up in Supabase")
        return self._response(response)

    async def sign_in_with_password(self, email: str, password: str) -> ProviderResponse:
        response = await self._call(
            self._client.auth.sign_in_with_password,
            {"email": email, "password": password},
        )
        return self._response(response)

    async def sign_out(self, scope: SignOutScope = "global") -> None:
        await self._call(self._client.auth.sign_out, {"scope": scope})

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        await self._call(
            self._client.auth.reset_password_for_email,
            email,
            {"redirect_to": redirect_to},
        )

    async def update_password(self, password: str) -> Optional[AuthUser]:
        response = await self._call(self._client.auth.update_user, {"password": password})
        return to_auth_user(getattr(response, "user", None))

    async def set_session(self, access_token: str, refresh_token: str) -> ProviderResponse:
        response = await self._call(
            self._client.auth.set_session, access_token, refresh_token
        )
        return self._response(response)

    async def get_session(self) -> Optional[AuthSession]:
        session = to_auth_session(await self._call(self._client.auth.get_session))
        if session:
            self.bind_data_session(session)
        return session

    async def establish_from_callback(
        self, params: Mapping[str, str]
    ) -> Optional[ProviderResponse]:
        """
        Turn the parameters of an email-link landing into a session.

        Supports token pairs (implicit links), ``token_hash`` + ``type``
        (OTP verification links) and ``code`` (PKCE links). Returns None when
        the link carries none of them.
        """
        if params.get("access_token") and params.get("refresh_token"):
            return await self.set_session(params["access_token"], params["refresh_token"])

        if params.get("token_hash") and params.get("type"):
            response = await self._call(
                self._client.auth.verify_otp,
                {"token_hash": params["token_hash"], "type": params["type"]},
            )
            return self._response(response)

        if params.get("code"):
            response = await self._call(
                self._client.auth.exchange_code_for_session,
                {"auth_code": params["code"]},
            )
            return self._response(response)

        return None

    def on_auth_state_change(self, listener: AuthEventListener) -> Callable[[], None]:
        """Subscribe to provider auth events; returns an unsubscribe callable."""

        def _forward(event: Any, session: Any) -> None:
            listener(getattr(event, "value", event), to_auth_session(session))

        subscription = self._client.auth.on_auth_state_change(_forward)
        return subscription.unsubscribe
