"""Profile and payout-method schemas."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from libs.common.notifications import Notification
from services.referrals_service.models import AppRole, PaymentMethod


class ZelleDetails(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    email_or_phone: str = Field(..., min_length=1)


class PaypalDetails(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    email: EmailStr


class BankTransferDetails(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    full_name: str = Field(..., min_length=1)
    bank_name: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=1)
    routing_number: str = Field(..., min_length=1)


PAYMENT_DETAILS_SCHEMAS: dict[PaymentMethod, type[BaseModel]] = {
    PaymentMethod.ZELLE: ZelleDetails,
    PaymentMethod.PAYPAL: PaypalDetails,
    PaymentMethod.BANK_TRANSFER: BankTransferDetails,
}


class PaymentProfileUpdate(BaseModel):
    """
    Payout method chosen by a referrer.

    The required keys of ``payment_details`` depend on ``payment_method``;
    keys that do not belong to the method are dropped.
    """

    payment_method: PaymentMethod
    payment_details: dict[str, Any]

    @model_validator(mode="after")
    def details_match_method(self) -> "PaymentProfileUpdate":
        schema = PAYMENT_DETAILS_SCHEMAS[self.payment_method]
        self.payment_details = schema.model_validate(self.payment_details).model_dump(
            mode="json"
        )
        return self


class ProfileResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: uuid.UUID
    name: str
    payment_method: Optional[PaymentMethod] = None
    payment_details: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileView(BaseModel):
    profile: Optional[ProfileResponse] = None
    notifications: list[Notification] = Field(default_factory=list)


class AdminUserResponse(ProfileResponse):
    role: Optional[AppRole] = None
    referral_count: int = 0


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]
    total: int
    notifications: list[Notification] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    role: AppRole
