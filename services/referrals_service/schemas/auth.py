"""Auth and password-reset schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from libs.auth.models import AppRole, AuthUser
from libs.common.notifications import Notification


class SignUpRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)


class SignInRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr


class PasswordResetRequest(BaseModel):
    """New password as typed twice in the reset form."""

    password: str
    confirm_password: str


class AuthActionResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    user: Optional[AuthUser] = None
    role: Optional[AppRole] = None
    notifications: list[Notification] = Field(default_factory=list)


class SignInView(BaseModel):
    view: Literal["auth"] = "auth"
    notifications: list[Notification] = Field(default_factory=list)


class ResetPasswordView(BaseModel):
    view: Literal["reset_password"] = "reset_password"
    link_valid: bool
    error: Optional[str] = None
    notifications: list[Notification] = Field(default_factory=list)


class ResetPasswordResult(BaseModel):
    success: bool
    error: Optional[str] = None
    redirect_to: Optional[str] = None
    redirect_delay_seconds: Optional[int] = None
    notifications: list[Notification] = Field(default_factory=list)
