"""
FastAPI dependency injection utilities for authentication, services and request context.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.services.auth import AuthService
from app.services.draft import DraftService
from app.services.featuring import FeaturingService
from app.services.notification import NotificationService
from app.services.payment import PaymentService
from app.services.payment_gateway import PaymentGatewayClient
from app.services.pricing import PricingService
from app.services.property import PropertyService
from app.services.registration import RegistrationService
from app.services.user import UserService
from app.services.vetting import VettingService
from app.utils.country import resolve_country
from app.utils.exceptions import (
    APIException,
    UnauthorizedError,
    InactiveUserError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_notification_service() -> NotificationService:
    """Email sender; overridden in tests with a recording double."""
    return NotificationService()


def get_payment_gateway() -> PaymentGatewayClient:
    return PaymentGatewayClient()


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
) -> PropertyService:
    return PropertyService(db, notifier)


async def get_draft_service(db: AsyncSession = Depends(get_db)) -> DraftService:
    return DraftService(db)


async def get_registration_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
) -> RegistrationService:
    return RegistrationService(db, notifier)


async def get_vetting_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
) -> VettingService:
    return VettingService(db, notifier)


async def get_user_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
) -> UserService:
    return UserService(db, notifier)


async def get_pricing_service(db: AsyncSession = Depends(get_db)) -> PricingService:
    return PricingService(db)


async def get_featuring_service(db: AsyncSession = Depends(get_db)) -> FeaturingService:
    return FeaturingService(db)


async def get_payment_service(
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notification_service)
) -> PaymentService:
    return PaymentService(db, gateway=gateway, notifier=notifier)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except APIException:
        raise
    except Exception as e:
        raise UnauthorizedError(f"Authentication failed: {str(e)}")


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise InactiveUserError()

    return current_user


async def get_current_admin_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Any admin level. Finer checks (country scope, per-action flags) are made by the services.

    Raises:
        InsufficientPermissionsError: If user is not an admin
    """
    if not current_user.is_admin:
        raise InsufficientPermissionsError("access admin resources")

    return current_user


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get current user if a valid token is provided, otherwise None.
    Used by public endpoints that behave differently for signed-in users.
    """
    if not credentials:
        return None

    try:
        user = await auth_service.get_current_user(credentials.credentials)
    except APIException:
        return None
    return user if user.is_active else None


def get_request_country(
    request: Request,
    country: Optional[str] = Query(None, description="Country code, e.g. GY or JM")
) -> str:
    """Active country from the query parameter, country cookie, or hostname."""
    return resolve_country(
        explicit=country,
        cookie_value=request.cookies.get(settings.country_cookie_name),
        hostname=request.url.hostname
    )
