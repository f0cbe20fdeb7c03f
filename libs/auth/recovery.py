"""Password-recovery link handling.

A recovery link signs its opener in as a side effect. Instead of keeping that
session, the auth context parks it in the platform's storage slot and only
uses it once, to set the new password.
"""

import json
from collections.abc import Mapping
from typing import Optional

from pydantic import ValidationError

from libs.auth.models import AuthSession
from libs.auth.platform import Platform
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

RESET_PASSWORD_PATH = "/reset-password"


def is_recovery_callback(params: Mapping[str, str]) -> bool:
    """True when the query parameters look like a password-recovery landing."""
    return (
        params.get("type") == "recovery"
        or bool(params.get("access_token"))
        or bool(params.get("refresh_token"))
    )


def reset_password_url(query_string: str = "") -> str:
    if query_string:
        return f"{RESET_PASSWORD_PATH}?{query_string}"
    return RESET_PASSWORD_PATH


class RecoverySessionStore:
    """The single storage slot holding a serialized recovery session."""

    def __init__(self, platform: Platform, key: Optional[str] = None):
        self._platform = platform
        self.key = key or get_settings().RECOVERY_SESSION_KEY

    def save(self, session: AuthSession) -> None:
        self._platform.set_item(self.key, session.model_dump_json())

    def load(self) -> Optional[AuthSession]:
        raw = self._platform.get_item(self.key)
        if not raw:
            return None
        try:
            return AuthSession.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            logger.error(
                "Failed to parse recovery session",
                extra={"extra_fields": {"error": str(exc)}},
            )
            return None

    def clear(self) -> None:
        self._platform.remove_item(self.key)
