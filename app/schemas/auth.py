"""
Pydantic schemas for authentication requests and responses.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from app.schemas.user import UserResponse
from app.utils.permissions import AdminPermissions


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User's email address", examples=["agent@example.com"])
    password: str = Field(..., min_length=8, max_length=128, description="User's password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Valid refresh token")


class AccessTokenResponse(BaseModel):
    access_token: str = Field(..., description="New JWT access token")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., description="Access token expiration time in seconds", examples=[1800])


class CurrentUserResponse(UserResponse):
    """Current user with the resolved admin capability set."""

    permissions: AdminPermissions = Field(default_factory=AdminPermissions)


class LoginResponse(BaseModel):
    """Complete login response schema."""

    user: CurrentUserResponse
    access_token: str
    refresh_token: str
    token_type: str = Field(default="bearer")
    expires_in: int
