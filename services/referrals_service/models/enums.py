"""Enum definitions for the referral pipeline.

Values match the Postgres enum types created by the migrations, so they can
be sent to the store as-is.
"""

import enum

from libs.auth.models import AppRole


class ReferralStage(str, enum.Enum):
    """Pipeline stages, in order."""

    REFERRED_CONNECTION = "Referred Connection"
    CLIENT_SIGNED = "Client Signed"
    SITE_INSPECTION_DONE = "Site Inspection Done"
    DOCUMENTS_VERIFIED = "Documents Verified"
    SOLAR_INSTALLED = "Solar Installed"

    @property
    def step(self) -> int:
        """1-based position in the pipeline."""
        return list(ReferralStage).index(self) + 1

    @property
    def is_final(self) -> bool:
        return self is ReferralStage.SOLAR_INSTALLED


class BonusStatus(str, enum.Enum):
    """Whether the referrer's bonus for a referral has been paid."""

    PENDING = "Pending"
    PAID = "Paid"


class PaymentMethod(str, enum.Enum):
    """Payout methods a referrer can choose."""

    ZELLE = "zelle"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"


__all__ = ["AppRole", "BonusStatus", "PaymentMethod", "ReferralStage"]
