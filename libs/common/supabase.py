"""Supabase client construction.

Each browser request gets its own client. The client's auth storage is the
request's signed session cookie, so a sign-in made in one request is visible
to the next one from the same browser and nowhere else.
"""

from collections.abc import MutableMapping
from typing import Any, Optional

from supabase import Client, ClientOptions, create_client

from libs.common.config import get_settings

# Key the auth client persists its session under.
AUTH_STORAGE_KEY = "supabase.auth.token"


class SessionStorage:
    """Auth-client storage backed by a mutable mapping (the session cookie)."""

    def __init__(self, store: MutableMapping[str, Any]):
        self._store = store

    def get_item(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._store[key] = value

    def remove_item(self, key: str) -> None:
        self._store.pop(key, None)


def get_supabase_client(storage: Optional[SessionStorage] = None) -> Client:
    """Create an anon-key client; row-level policies apply to every query."""
    settings = get_settings()
    options = ClientOptions(
        auto_refresh_token=False,
        persist_session=storage is not None,
    )
    if storage is not None:
        options.storage = storage
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, options=options)

