import enum
import json
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError


class AppRole(str, enum.Enum):
    """Roles stored in the user_roles table."""

    ADMIN = "admin"
    REFERRER = "referrer"


class AuthUser(BaseModel):
    """
    Represents an authenticated user from Supabase.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("id", "sub"))
    email: Optional[str] = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_access_token(cls, token: str) -> Optional["AuthUser"]:
        """
        Read the user from an access token's claims without verifying it.

        Only for request bookkeeping (logging, rate-limit keys); authorization
        is always left to Supabase.
        """
        try:
            claims = jwt.get_unverified_claims(token)
            return cls(**claims)
        except (JWTError, ValidationError):
            return None

    @classmethod
    def from_stored_session(cls, raw: Optional[str]) -> Optional["AuthUser"]:
        """Read the user from a serialized session as persisted by the client."""
        if not raw:
            return None
        try:
            token = json.loads(raw).get("access_token")
        except (TypeError, ValueError, AttributeError):
            return None
        return cls.from_access_token(token) if token else None


class AuthSession(BaseModel):
    """A Supabase session: tokens plus the user they were issued for."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    token_type: str = "bearer"
    user: Optional[AuthUser] = None


class AuthState(BaseModel):
    """Snapshot of an AuthContext published to subscribers."""

    event: str
    user: Optional[AuthUser] = None
    role: Optional[AppRole] = None
    loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


class AuthOutcome(BaseModel):
    """Result of an auth operation; ``error`` carries the user-facing message."""

    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
