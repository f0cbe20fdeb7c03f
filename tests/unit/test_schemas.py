"""Unit tests for referral and profile request validation."""

import uuid

import pytest
from pydantic import ValidationError

from services.referrals_service.models import BonusStatus, PaymentMethod, ReferralStage
from services.referrals_service.schemas import (
    AdminReferralCreate,
    PaymentProfileUpdate,
    ReferralContactUpdate,
    ReferralCreate,
    ReferralResponse,
    ReferralStatusUpdate,
)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_stages_are_ordered():
    assert [stage.value for stage in ReferralStage] == [
        "Referred Connection",
        "Client Signed",
        "Site Inspection Done",
        "Documents Verified",
        "Solar Installed",
    ]
    assert ReferralStage.REFERRED_CONNECTION.step == 1
    assert ReferralStage.SOLAR_INSTALLED.step == 5
    assert ReferralStage.SOLAR_INSTALLED.is_final
    assert not ReferralStage.CLIENT_SIGNED.is_final


@pytest.mark.unit
def test_response_exposes_stage_step():
    referral = ReferralResponse.model_validate(
        {
            "id": str(uuid.uuid4()),
            "user_id": str(uuid.uuid4()),
            "client_name": "Casey Client",
            "stage": "Site Inspection Done",
            "bonus_status": "Pending",
            "created_at": "2025-08-01T00:00:00+00:00",
        }
    )

    assert referral.model_dump(mode="json")["stage_step"] == 3


# ---------------------------------------------------------------------------
# Referral input
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("name", ["", "   "])
def test_blank_client_name_is_rejected(name):
    with pytest.raises(ValidationError):
        ReferralCreate(client_name=name)


@pytest.mark.unit
def test_blank_optional_fields_become_none():
    referral = ReferralCreate(
        client_name="  Casey Client ",
        client_email="",
        client_phone="  ",
        client_address="12 Sun St",
    )

    assert referral.client_name == "Casey Client"
    assert referral.client_email is None
    assert referral.client_phone is None
    assert referral.client_address == "12 Sun St"


@pytest.mark.unit
def test_invalid_client_email_is_rejected():
    with pytest.raises(ValidationError):
        ReferralCreate(client_name="Casey", client_email="not-an-email")


@pytest.mark.unit
def test_owner_id_in_body_is_ignored():
    referral = ReferralCreate.model_validate(
        {"client_name": "Casey", "user_id": str(uuid.uuid4())}
    )

    assert "user_id" not in referral.model_dump()


@pytest.mark.unit
def test_admin_create_requires_user_id():
    with pytest.raises(ValidationError):
        AdminReferralCreate(client_name="Casey")


@pytest.mark.unit
def test_contact_update_needs_a_field():
    with pytest.raises(ValidationError):
        ReferralContactUpdate()
    with pytest.raises(ValidationError):
        ReferralContactUpdate(client_name=None)

    update = ReferralContactUpdate(client_phone="555-0100")
    assert update.model_dump(exclude_unset=True) == {"client_phone": "555-0100"}


@pytest.mark.unit
def test_status_update_restricts_values():
    update = ReferralStatusUpdate(stage="Client Signed", bonus_status="Paid")
    assert update.stage is ReferralStage.CLIENT_SIGNED
    assert update.bonus_status is BonusStatus.PAID

    with pytest.raises(ValidationError):
        ReferralStatusUpdate(stage="Signed")
    with pytest.raises(ValidationError):
        ReferralStatusUpdate(bonus_status="Unpaid")
    with pytest.raises(ValidationError):
        ReferralStatusUpdate(stage=None)
    with pytest.raises(ValidationError):
        ReferralStatusUpdate()


@pytest.mark.unit
def test_status_update_may_clear_notes():
    update = ReferralStatusUpdate(notes=None)

    assert update.model_dump(mode="json", exclude_unset=True) == {"notes": None}


# ---------------------------------------------------------------------------
# Payment details
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "method,details",
    [
        ("zelle", {"email_or_phone": "555-0100"}),
        ("paypal", {"email": "pay@example.com"}),
        (
            "bank_transfer",
            {
                "full_name": "Riley Referrer",
                "bank_name": "First Bank",
                "account_number": "000123",
                "routing_number": "021000021",
            },
        ),
    ],
)
def test_payment_details_match_method(method, details):
    update = PaymentProfileUpdate(payment_method=method, payment_details=details)

    assert update.payment_method is PaymentMethod(method)
    assert update.payment_details == details


@pytest.mark.unit
@pytest.mark.parametrize(
    "method,details",
    [
        ("zelle", {}),
        ("zelle", {"email_or_phone": "  "}),
        ("paypal", {"email": "nope"}),
        ("bank_transfer", {"full_name": "Riley", "bank_name": "First Bank"}),
        ("venmo", {"handle": "@riley"}),
    ],
)
def test_payment_details_rejected(method, details):
    with pytest.raises(ValidationError):
        PaymentProfileUpdate(payment_method=method, payment_details=details)


@pytest.mark.unit
def test_payment_details_drop_unknown_keys():
    update = PaymentProfileUpdate(
        payment_method="paypal",
        payment_details={"email": "pay@example.com", "account_number": "123"},
    )

    assert update.payment_details == {"email": "pay@example.com"}
