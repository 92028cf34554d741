"""
Pydantic schemas for agent vetting.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.models.vetting import VettingStatus


class VettingResponse(BaseModel):
    id: str
    user_id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    company_name: Optional[str] = None
    license_number: Optional[str] = None
    years_experience: Optional[int] = None
    specialties: List[str] = Field(default_factory=list)
    reference1_name: Optional[str] = None
    reference1_contact: Optional[str] = None
    reference2_name: Optional[str] = None
    reference2_contact: Optional[str] = None
    country_id: str
    status: VettingStatus
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VettingListResponse(BaseModel):
    applications: List[VettingResponse]
    total: int
    page: int
    page_size: int
    country_filter: Optional[str] = None


class VettingDenyRequest(BaseModel):
    reason: str = Field(..., min_length=3, max_length=2000, description="Shown to the applicant")


class VettingApproveRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class VettingInfoRequest(BaseModel):
    """Ask the applicant for more information before deciding."""

    notes: str = Field(..., min_length=3, max_length=2000)


class VettingUpdateRequest(BaseModel):
    """Applicant's corrections, submitted after a denial or an info request."""

    phone: Optional[str] = Field(None, min_length=7, max_length=32)
    company_name: Optional[str] = Field(None, max_length=255)
    license_number: Optional[str] = Field(None, max_length=100)
    years_experience: Optional[int] = Field(None, ge=0, le=80)
    specialties: Optional[List[str]] = None
    reference1_name: Optional[str] = Field(None, max_length=200)
    reference1_contact: Optional[str] = Field(None, max_length=200)
    reference2_name: Optional[str] = Field(None, max_length=200)
    reference2_contact: Optional[str] = Field(None, max_length=200)


class VettingDecisionResponse(BaseModel):
    success: bool
    message: str
    application: VettingResponse
