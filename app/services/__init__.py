"""
Service layer for business logic implementation.
Services sit between routers and repositories and raise typed API exceptions.
"""

from .auth import AuthService
from .audit import AuditService
from .draft import DraftService
from .error_handler import ErrorHandlerService
from .featuring import FeaturingService
from .notification import NotificationService
from .payment import PaymentService
from .payment_gateway import PaymentGatewayClient
from .pricing import PricingService
from .property import PropertyService
from .registration import RegistrationService
from .user import UserService
from .vetting import VettingService

__all__ = [
    "AuthService",
    "AuditService",
    "DraftService",
    "ErrorHandlerService",
    "FeaturingService",
    "NotificationService",
    "PaymentService",
    "PaymentGatewayClient",
    "PricingService",
    "PropertyService",
    "RegistrationService",
    "UserService",
    "VettingService",
]
