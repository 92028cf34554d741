"""
Typed errors for the Portal Home Hub API.

Services and dependencies raise these; the handlers registered in app.main render
them as the standard error envelope. Each class fixes its HTTP status and error code.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """HTTPException carrying a machine-readable error code."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class _FixedStatusError(APIException):
    """Base for errors whose status and code never vary."""

    http_status: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"
    extra_headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: str):
        super().__init__(self.http_status, detail, self.code, self.extra_headers)


class ValidationError(_FixedStatusError):
    """Business validation failure, optionally with per-field messages."""

    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class BadRequestError(_FixedStatusError):
    pass


class UnauthorizedError(_FixedStatusError):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    extra_headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(detail)


class ForbiddenError(_FixedStatusError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(detail)


class NotFoundError(_FixedStatusError):
    """`<resource> not found`, with the identifier appended when known."""

    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        suffix = f" with ID: {resource_id}" if resource_id else ""
        super().__init__(f"{resource} not found{suffix}")


class ConflictError(_FixedStatusError):
    http_status = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class GoneError(_FixedStatusError):
    """The resource existed but has lapsed, e.g. an expired draft."""

    http_status = status.HTTP_410_GONE
    code = "GONE"


class ExternalServiceError(_FixedStatusError):
    """An upstream provider such as the card gateway failed."""

    http_status = status.HTTP_502_BAD_GATEWAY
    code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, service: str, detail: Optional[str] = None):
        message = f"{service} request failed"
        super().__init__(f"{message}: {detail}" if detail else message)


# Authentication

class InvalidCredentialsError(UnauthorizedError):
    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class InactiveUserError(ForbiddenError):
    def __init__(self, detail: str = "User account is inactive"):
        super().__init__(detail)


# Authorization

class InsufficientPermissionsError(ForbiddenError):
    """The caller's role or admin tier does not allow the action."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


class CountryAccessError(ForbiddenError):
    """Admin tried to act on data outside their assigned country."""

    def __init__(self, country_id: Optional[str] = None):
        detail = "You can only manage data for your assigned country"
        if country_id:
            detail += f" (target country: {country_id})"
        super().__init__(detail)


# Listings

class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


class PropertyOwnershipError(ForbiddenError):
    def __init__(self, detail: str = "Only the listing owner can do that"):
        super().__init__(detail)


class InvalidStatusTransitionError(BadRequestError):
    """Requested status change is not in the transition table."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change property status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


# Payments and accounts

class PaymentReferenceExpiredError(GoneError):
    """Bank-transfer reference passed its expiry time."""

    def __init__(self, reference_code: str):
        super().__init__(f"Payment reference {reference_code} has expired")


class DuplicateResourceError(ConflictError):
    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


class InsufficientCreditsError(_FixedStatusError):
    """The account has no featured-listing credits left."""

    http_status = status.HTTP_402_PAYMENT_REQUIRED
    code = "INSUFFICIENT_CREDITS"

    def __init__(self, available: int, required: int = 1):
        super().__init__(f"Insufficient featured credits. Available: {available}, Required: {required}")
