"""
Error rendering for the global exception handlers.
Every error leaves the API as {"error": {code, message, timestamp, request_id, details?}}.
"""

from typing import Dict, Any, Optional, List
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

# Substrings of driver messages mapped to client-safe explanations
_CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("duplicate key", "Duplicate value for unique field"),
    ("foreign key", "Referenced record does not exist"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:
    """
    Turns exceptions into the JSON error envelope.

    The request id comes from request.state (set by ValidationMiddleware) so the
    body matches the X-Request-ID header; without a request a fresh id is generated.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the error envelope.

        Args:
            error_code: Machine-readable code, e.g. NOT_FOUND
            message: Human-readable message
            details: Optional per-field errors
            request_id: Correlation id for logs

        Returns:
            Dict with a single "error" key
        """
        error: Dict[str, Any] = {
            "code": error_code,
            "message": message,
            "timestamp": utc_now().isoformat().replace("+00:00", "Z"),
        }
        if details:
            error["details"] = details
        if request_id:
            error["request_id"] = request_id
        return {"error": error}

    @staticmethod
    def _respond(
        status_code: int,
        error_code: str,
        message: str,
        request: Optional[Request],
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        body = ErrorHandlerService.format_error_response(
            error_code, message, details, ErrorHandlerService._request_id(request)
        )
        return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)

    @staticmethod
    def _log_extra(request: Optional[Request], **fields: Any) -> Dict[str, Any]:
        return {
            "request_id": ErrorHandlerService._request_id(request),
            "path": request.url.path if request else None,
            **fields
        }

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """Typed errors raised by services and dependencies."""
        error_code = exception.error_code or "API_ERROR"
        logger.warning(
            f"{error_code} ({exception.status_code}): {exception.detail}",
            extra=ErrorHandlerService._log_extra(request, error_code=error_code, status_code=exception.status_code)
        )

        details = exception.field_errors if isinstance(exception, ValidationError) else None
        return ErrorHandlerService._respond(
            exception.status_code, error_code, exception.detail, request,
            details=details, headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(exception, request: Optional[Request] = None) -> JSONResponse:
        """
        Request body/query validation failures.

        Args:
            exception: RequestValidationError or pydantic ValidationError
            request: Optional FastAPI request object
        """
        details = [
            {
                "field": " -> ".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
                "input": error.get("input"),
            }
            for error in exception.errors()
        ]
        logger.warning(
            f"Request validation failed with {len(details)} field errors",
            extra=ErrorHandlerService._log_extra(request, error_count=len(details))
        )
        return ErrorHandlerService._respond(422, "VALIDATION_ERROR", "Request validation failed", request, details)

    @staticmethod
    def handle_database_error(exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        """Integrity violations become 409; anything else from the database is a 500."""
        if isinstance(exception, IntegrityError):
            status_code, error_code = 409, "INTEGRITY_ERROR"
            constraint = ErrorHandlerService._describe_constraint(exception)
            message = f"Constraint violation: {constraint}" if constraint else "Data integrity constraint violation"
        else:
            status_code, error_code = 500, "DATABASE_ERROR"
            message = "Database operation failed"

        logger.error(
            f"{error_code}: {type(exception).__name__}: {exception}",
            extra=ErrorHandlerService._log_extra(request, error_code=error_code),
            exc_info=True
        )
        return ErrorHandlerService._respond(status_code, error_code, message, request)

    @staticmethod
    def handle_http_exception(exception: HTTPException, request: Optional[Request] = None) -> JSONResponse:
        """Framework HTTP errors such as 404 for unknown routes and 405."""
        logger.warning(
            f"HTTP {exception.status_code}: {exception.detail}",
            extra=ErrorHandlerService._log_extra(request, status_code=exception.status_code)
        )
        return ErrorHandlerService._respond(
            exception.status_code, f"HTTP_{exception.status_code}", str(exception.detail), request,
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """Log the traceback; the client only sees a generic 500."""
        logger.error(
            f"Unhandled {type(exception).__name__}: {exception}",
            extra=ErrorHandlerService._log_extra(request),
            exc_info=exception
        )
        return ErrorHandlerService._respond(
            500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later.", request
        )

    @staticmethod
    def _request_id(request: Optional[Request]) -> str:
        request_id = getattr(request.state, "request_id", None) if request is not None else None
        return request_id or uuid.uuid4().hex[:8]

    @staticmethod
    def _describe_constraint(exception: IntegrityError) -> Optional[str]:
        driver_message = str(exception.orig).lower()
        for needle, description in _CONSTRAINT_MESSAGES:
            if needle in driver_message:
                return description
        return None
