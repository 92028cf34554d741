"""
Pydantic schemas for request/response validation.
"""

from .auth import (
    LoginRequest,
    RefreshTokenRequest,
    AccessTokenResponse,
    CurrentUserResponse,
    LoginResponse,
)
from .user import (
    UserResponse,
    UserListResponse,
    AgentRegistrationRequest,
    OwnerRegistrationRequest,
    RegistrationResponse,
    AccountDecisionRequest,
)
from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyStatusChangeRequest,
    PropertyStatusChangeResponse,
    DraftSaveRequest,
    DraftSummary,
    DraftListResponse,
    DraftCleanupResponse,
    ModerationQueueResponse,
)
from .vetting import (
    VettingResponse,
    VettingListResponse,
    VettingApproveRequest,
    VettingDenyRequest,
    VettingInfoRequest,
    VettingUpdateRequest,
    VettingDecisionResponse,
)
from .pricing import (
    PricingPlanResponse,
    PricingListResponse,
    PricingPlanUpdate,
    PricingPlanCreate,
    PricingUpdateResponse,
)
from .payment import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    BankTransferRequest,
    BankTransferResponse,
    PaymentReferenceResponse,
    PaymentHistoryResponse,
    PaymentHistoryListResponse,
    AdminPaymentResponse,
    AdminPaymentListResponse,
    PaymentDecisionRequest,
    PaymentDecisionResponse,
)
from .country import CountrySelectRequest, CountryResponse
from .notification import EmailDispatchRequest, EmailDispatchResponse

__all__ = [
    # Authentication
    "LoginRequest",
    "RefreshTokenRequest",
    "AccessTokenResponse",
    "CurrentUserResponse",
    "LoginResponse",

    # Users and registration
    "UserResponse",
    "UserListResponse",
    "AgentRegistrationRequest",
    "OwnerRegistrationRequest",
    "RegistrationResponse",
    "AccountDecisionRequest",

    # Properties and drafts
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyStatusChangeRequest",
    "PropertyStatusChangeResponse",
    "DraftSaveRequest",
    "DraftSummary",
    "DraftListResponse",
    "DraftCleanupResponse",
    "ModerationQueueResponse",

    # Vetting
    "VettingResponse",
    "VettingListResponse",
    "VettingApproveRequest",
    "VettingDenyRequest",
    "VettingInfoRequest",
    "VettingUpdateRequest",
    "VettingDecisionResponse",

    # Pricing
    "PricingPlanResponse",
    "PricingListResponse",
    "PricingPlanUpdate",
    "PricingPlanCreate",
    "PricingUpdateResponse",

    # Payments
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "BankTransferRequest",
    "BankTransferResponse",
    "PaymentReferenceResponse",
    "PaymentHistoryResponse",
    "PaymentHistoryListResponse",
    "AdminPaymentResponse",
    "AdminPaymentListResponse",
    "PaymentDecisionRequest",
    "PaymentDecisionResponse",

    # Country and notifications
    "CountrySelectRequest",
    "CountryResponse",
    "EmailDispatchRequest",
    "EmailDispatchResponse",
]
