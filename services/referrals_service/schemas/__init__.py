"""Referrals service schemas package."""

from services.referrals_service.schemas.auth import (  # noqa: F401
    AuthActionResponse,
    ForgotPasswordRequest,
    PasswordResetRequest,
    ResetPasswordResult,
    ResetPasswordView,
    SignInRequest,
    SignInView,
    SignUpRequest,
)
from services.referrals_service.schemas.dashboard import (  # noqa: F401
    AdminPanelView,
    ReferrerDashboardView,
)
from services.referrals_service.schemas.profile import (  # noqa: F401
    PAYMENT_DETAILS_SCHEMAS,
    AdminUserListResponse,
    AdminUserResponse,
    BankTransferDetails,
    PaymentProfileUpdate,
    PaypalDetails,
    ProfileResponse,
    ProfileView,
    RoleUpdate,
    ZelleDetails,
)
from services.referrals_service.schemas.referral import (  # noqa: F401
    AdminReferralCreate,
    ReferralContactUpdate,
    ReferralCreate,
    ReferralListResponse,
    ReferralResponse,
    ReferralStatusUpdate,
)
