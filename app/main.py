"""
Portal Home Hub API application.
Wires routers, middleware and the error envelope handlers onto one FastAPI app.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from app.config import settings
from app.database import check_database_connection, close_db_connection
from app.routers import (
    auth_router,
    registration_router,
    drafts_router,
    properties_router,
    vetting_router,
    pricing_router,
    featuring_router,
    country_router,
    payments_router,
    notifications_router,
    admin_router
)
from app.utils.exceptions import APIException
from app.services.error_handler import ErrorHandlerService
from app.middleware.validation import ValidationMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the database and email configuration on startup, release the pool on shutdown."""
    logger.info(f"{settings.app_name} {settings.app_version} starting ({settings.environment})")

    if not settings.is_testing and not await check_database_connection():
        logger.error("Database unreachable at startup; requests will fail until it recovers")

    if not settings.email_enabled:
        logger.warning("EMAIL_API_KEY is not set; notification emails will be skipped")

    yield

    logger.info(f"{settings.app_name} shutting down")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Multi-tenant real-estate marketplace API for Guyana and Jamaica.

    ## Features

    * **Listings**: Property CRUD, public search, drafts and a moderated status workflow
    * **Onboarding**: Agent registration with vetting, landlord and FSBO account approval
    * **Admin**: Country-scoped moderation, pricing management and payment reconciliation
    * **Payments**: Card payment intents and bank-transfer reference codes
    * **Country selection**: Per-country pricing and listings chosen by cookie

    ## Authentication

    Use the `/api/v1/auth/login` endpoint to obtain a JWT token,
    then include it in the Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Authentication", "description": "User authentication and token management"},
        {"name": "Registration", "description": "Agent, landlord and FSBO sign-up"},
        {"name": "Properties", "description": "Listing management, search and status workflow"},
        {"name": "Drafts", "description": "Autosaved listing drafts"},
        {"name": "Agent Vetting", "description": "Applicant view of the agent application"},
        {"name": "Pricing", "description": "Per-country pricing plans"},
        {"name": "Country", "description": "Country selection"},
        {"name": "Payments", "description": "Card payments, bank transfers and payment history"},
        {"name": "Notifications", "description": "Admin email dispatch"},
        {"name": "Admin", "description": "Country-scoped moderation and management"},
        {"name": "Health", "description": "System health endpoints"}
    ],
    contact={
        "name": "Portal Home Hub Support",
        "email": "info@portalhomehub.com",
    },
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(
    ValidationMiddleware,
    max_request_size=settings.max_request_size,
    enable_request_logging=settings.debug
)

# Drafts before properties so /properties/drafts is not captured by /properties/{property_id}
for router in (
    auth_router,
    registration_router,
    drafts_router,
    properties_router,
    vetting_router,
    pricing_router,
    featuring_router,
    country_router,
    payments_router,
    notifications_router,
    admin_router,
):
    app.include_router(router, prefix=settings.api_v1_prefix)


def _render_with(renderer):
    async def handler(request: Request, exc: Exception):
        return renderer(exc, request)
    return handler


for exc_class, renderer in (
    (APIException, ErrorHandlerService.handle_api_exception),
    (RequestValidationError, ErrorHandlerService.handle_validation_error),
    (PydanticValidationError, ErrorHandlerService.handle_validation_error),
    (SQLAlchemyError, ErrorHandlerService.handle_database_error),
    (StarletteHTTPException, ErrorHandlerService.handle_http_exception),
    (Exception, ErrorHandlerService.handle_unexpected_error),
):
    app.add_exception_handler(exc_class, _render_with(renderer))


@app.get("/", tags=["Health"])
async def root():
    """Service banner with links to the docs."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "api_prefix": settings.api_v1_prefix,
        "docs": "/docs",
        "supported_countries": settings.supported_countries
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness plus database reachability; 503 when the database is down."""
    if not await check_database_connection():
        raise HTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "version": settings.app_version,
        "database": "connected",
        "email": "configured" if settings.email_enabled else "disabled"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
