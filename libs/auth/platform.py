"""Platform adapter for the auth flow.

The session/recovery logic needs three things a browser would otherwise
provide as globals: the current URL's query parameters, a small persistent
key/value slot, and a way to navigate elsewhere. ``Platform`` names that
surface so the flow can run against an HTTP request or a test double.
"""

from collections.abc import Mapping, MutableMapping
from typing import Any, Optional, Protocol

from fastapi import Request

from libs.common.config import get_settings


class Platform(Protocol):
    origin: str

    def query_params(self) -> Mapping[str, str]: ...

    def query_string(self) -> str: ...

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def redirect(self, url: str) -> None: ...


class RequestPlatform:
    """Platform backed by a Starlette request and its signed session cookie."""

    def __init__(self, request: Request, origin: Optional[str] = None):
        self._request = request
        self.origin = origin or get_settings().SITE_URL
        self.redirect_to: Optional[str] = None

    @property
    def _storage(self) -> MutableMapping[str, Any]:
        return self._request.session

    def query_params(self) -> Mapping[str, str]:
        return self._request.query_params

    def query_string(self) -> str:
        return self._request.url.query

    def get_item(self, key: str) -> Optional[str]:
        return self._storage.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._storage[key] = value

    def remove_item(self, key: str) -> None:
        self._storage.pop(key, None)

    def redirect(self, url: str) -> None:
        self.redirect_to = url
