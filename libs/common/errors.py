"""Error types shared across the referral service."""

from typing import Optional

# PostgreSQL error code for insufficient_privilege, returned when a
# row-level security policy rejects a write.
POLICY_VIOLATION_CODE = "42501"


class AuthProviderError(Exception):
    """An error reported by the hosted auth provider."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class StoreError(Exception):
    """An error reported by the data store (constraint or policy failure)."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def is_policy_violation(self) -> bool:
        return self.code == POLICY_VIOLATION_CODE


class SignInRequired(Exception):
    """Raised when a protected view is requested without a session."""

    def __init__(self, redirect_to: str = "/auth"):
        super().__init__("Sign in required")
        self.redirect_to = redirect_to
