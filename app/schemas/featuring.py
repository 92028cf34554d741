"""
Pydantic schemas for featured listing placement.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid

from app.schemas.property import PropertyResponse


class FeaturePurchaseRequest(BaseModel):
    property_id: uuid.UUID = Field(..., description="Listing to feature")
    duration_days: Optional[int] = Field(
        None, ge=1, description="Placement length in days; the configured default when omitted"
    )


class FeaturePurchaseResponse(BaseModel):
    success: bool
    message: str
    property: PropertyResponse
    featured_until: datetime
    credits_remaining: Optional[int] = Field(None, description="Omitted for admin placements, which use no credits")


class FeatureCreditsResponse(BaseModel):
    featured_credits: int
    featured_properties: List[PropertyResponse] = Field(default_factory=list)
