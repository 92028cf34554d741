"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, email/payment providers and per-country defaults.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List, Dict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    # Application configuration
    app_name: str = "Portal Home Hub API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/portal_home_hub"
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # JWT configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    jwt_refresh_token_expire_days: int = 7

    # API configuration
    api_v1_prefix: str = "/api/v1"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    max_request_size: int = 5 * 1024 * 1024  # 5MB

    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 100

    # Transactional email (Resend-compatible HTTP API)
    email_api_url: str = "https://api.resend.com"
    email_api_key: Optional[str] = None
    email_from: str = "Portal Home Hub <info@portalhomehub.com>"
    admin_notification_email: str = "admin@portalhomehub.com"
    frontend_url: str = "http://localhost:3000"
    support_whatsapp: str = "+592 762-9797"
    email_timeout_seconds: float = 10.0

    # Card payment gateway (Stripe)
    payment_gateway_secret_key: Optional[str] = None
    payment_gateway_timeout_seconds: float = 15.0

    # Currency conversion
    gyd_to_usd_rate: float = 210.0

    # Bank transfer details shown to payers
    bank_name: str = "Republic Bank (Guyana) Limited"
    bank_account_name: str = "Portal Home Hub Ltd"
    bank_account_number: str = "123-456-789"
    bank_branch: str = "Main Branch, Georgetown"
    bank_routing_number: str = "123456"
    bank_swift_code: str = "RBGYGYGE"
    bank_address: str = "Main & Water Streets, Georgetown, Guyana"

    # Payment limits (GYD)
    payment_min_amount: int = 100
    payment_max_amount: int = 50_000_000
    max_pending_references_per_user: int = 3
    reference_expiry_hours: int = 24

    # Country selection
    default_country: str = "GY"
    supported_countries: List[str] = ["GY", "JM"]
    country_cookie_name: str = "country-code"
    country_cookie_max_age: int = 60 * 60 * 24 * 365

    # Drafts
    draft_expiry_days: int = 30

    # Featured placement
    featured_listing_days: int = 30
    featured_max_days: int = 90

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("default_country")
    @classmethod
    def normalize_country(cls, v):
        return v.strip().upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def email_enabled(self) -> bool:
        """Emails are only dispatched when an API key is configured."""
        return bool(self.email_api_key)

    @property
    def bank_details(self) -> Dict[str, str]:
        """Bank account details included in bank-transfer instructions."""
        return {
            "bank_name": self.bank_name,
            "account_name": self.bank_account_name,
            "account_number": self.bank_account_number,
            "branch": self.bank_branch,
            "routing_number": self.bank_routing_number,
            "swift_code": self.bank_swift_code,
            "bank_address": self.bank_address,
        }

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
