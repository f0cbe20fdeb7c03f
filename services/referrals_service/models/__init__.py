"""Referrals service models package.

Rows come back from PostgREST as plain dicts; the enums here are the closed
value sets the database enforces for them.
"""

from services.referrals_service.models.enums import (  # noqa: F401
    AppRole,
    BonusStatus,
    PaymentMethod,
    ReferralStage,
)

# Table names exposed by PostgREST.
PROFILES_TABLE = "profiles"
USER_ROLES_TABLE = "user_roles"
REFERRALS_TABLE = "referrals"
