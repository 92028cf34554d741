"""
Pydantic schemas for user accounts and registration.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.models.user import UserType, AdminLevel, ApprovalStatus, SubscriptionStatus


class UserResponse(BaseModel):
    """User response schema (excluding sensitive data)."""

    id: str = Field(..., description="User's unique identifier")
    email: EmailStr = Field(..., description="User's email address", examples=["agent@example.com"])
    first_name: str
    last_name: str
    full_name: str
    phone: Optional[str] = None
    user_type: UserType = Field(..., description="Account type", examples=["agent"])
    admin_level: Optional[AdminLevel] = Field(None, description="Admin tier for admin accounts")
    country_id: str = Field(..., description="ISO country code", examples=["GY"])
    is_active: bool
    is_verified: bool
    approval_status: Optional[ApprovalStatus] = None
    approval_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    approval_date: Optional[datetime] = None
    subscription_status: SubscriptionStatus
    featured_credits: int = 0
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseModel):
    """Paginated account list for admins."""

    users: List[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class RegistrationBase(BaseModel):
    """Fields shared by every self-service registration."""

    first_name: str = Field(..., min_length=1, max_length=100, examples=["Jane"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    phone: str = Field(..., min_length=7, max_length=32, examples=["+592 600-0000"])
    password: str = Field(..., min_length=8, max_length=128)
    country_id: str = Field("GY", min_length=2, max_length=2, description="ISO country code")

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator("country_id")
    @classmethod
    def normalize_country(cls, v):
        return v.strip().upper()


class AgentRegistrationRequest(RegistrationBase):
    """Agent sign-up, including the vetting application."""

    company_name: Optional[str] = Field(None, max_length=255)
    license_number: Optional[str] = Field(None, max_length=100)
    years_experience: Optional[int] = Field(None, ge=0, le=80)
    specialties: List[str] = Field(default_factory=list)
    reference1_name: Optional[str] = Field(None, max_length=200)
    reference1_contact: Optional[str] = Field(None, max_length=200)
    reference2_name: Optional[str] = Field(None, max_length=200)
    reference2_contact: Optional[str] = Field(None, max_length=200)


class OwnerRegistrationRequest(RegistrationBase):
    """Landlord or FSBO sign-up."""

    model_config = {
        "json_schema_extra": {
            "example": {
                "first_name": "Mark",
                "last_name": "Persaud",
                "email": "mark@example.com",
                "phone": "+592 600-1234",
                "password": "securepassword123",
                "country_id": "GY",
            }
        }
    }


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse
    vetting_status: Optional[str] = None


class AccountDecisionRequest(BaseModel):
    """Admin decision on a landlord or FSBO account."""

    reason: Optional[str] = Field(None, max_length=2000, description="Required when rejecting")
    notes: Optional[str] = Field(None, max_length=2000)
