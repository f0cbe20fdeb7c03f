"""Referral request and response schemas."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from libs.common.notifications import Notification
from services.referrals_service.models import BonusStatus, ReferralStage


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# === Referrer input ===


class ReferralCreate(BaseModel):
    """New referral submitted by a referrer; the owner is always the caller."""

    model_config = ConfigDict(str_strip_whitespace=True)

    client_name: str = Field(..., min_length=1, max_length=200)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(None, max_length=50)
    client_address: Optional[str] = Field(None, max_length=500)

    @field_validator("client_email", "client_phone", "client_address", mode="before")
    @classmethod
    def empty_optional_fields(cls, v: Any) -> Any:
        return _blank_to_none(v)


class ReferralContactUpdate(BaseModel):
    """Fields an owner may change on their own referral."""

    model_config = ConfigDict(str_strip_whitespace=True)

    client_name: Optional[str] = Field(None, min_length=1, max_length=200)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(None, max_length=50)
    client_address: Optional[str] = Field(None, max_length=500)

    @field_validator("client_email", "client_phone", "client_address", mode="before")
    @classmethod
    def empty_optional_fields(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def require_changes(self) -> "ReferralContactUpdate":
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        if "client_name" in self.model_fields_set and self.client_name is None:
            raise ValueError("client_name cannot be cleared")
        return self


# === Admin input ===


class AdminReferralCreate(ReferralCreate):
    """Referral created by an admin on behalf of a referrer."""

    user_id: uuid.UUID


class ReferralStatusUpdate(BaseModel):
    """Pipeline fields an admin edits on any referral."""

    stage: Optional[ReferralStage] = None
    bonus_status: Optional[BonusStatus] = None
    notes: Optional[str] = Field(None, max_length=5000)

    @model_validator(mode="after")
    def require_changes(self) -> "ReferralStatusUpdate":
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        for field in ("stage", "bonus_status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be cleared")
        return self


# === Responses ===


class ReferralResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: uuid.UUID
    user_id: uuid.UUID
    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    stage: ReferralStage
    bonus_status: BonusStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    referrer_name: Optional[str] = None

    @computed_field
    @property
    def stage_step(self) -> int:
        return self.stage.step


class ReferralListResponse(BaseModel):
    referrals: list[ReferralResponse]
    total: int
    notifications: list[Notification] = Field(default_factory=list)
