"""
Pydantic schemas for pricing plans.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime
from app.models.pricing import PlanType
from app.models.user import UserType


class PricingPlanResponse(BaseModel):
    """Plan with display values for the plan's country currency."""

    id: str
    plan_name: str
    user_type: UserType
    plan_type: PlanType
    price: int = Field(..., description="Price in minor units")
    price_display: float = Field(..., description="Price in major units", examples=[15000.0])
    price_formatted: str = Field(..., examples=["GY$15,000"])
    currency: str
    max_properties: Optional[int] = None
    listing_duration_days: Optional[int] = None
    featured_listings_included: int = 0
    features: List[str] = Field(default_factory=list)
    is_active: bool
    is_popular: bool
    display_order: int
    country_id: str
    created_at: datetime
    updated_at: datetime


class PricingListResponse(BaseModel):
    country_id: str
    country_info: Dict[str, str]
    plans: List[PricingPlanResponse]


class PricingPlanUpdate(BaseModel):
    """Editable plan fields; omitted fields are left unchanged."""

    plan_name: Optional[str] = Field(None, min_length=2, max_length=150)
    price: Optional[int] = Field(None, ge=0)
    features: Optional[List[str]] = None
    max_properties: Optional[int] = Field(None, ge=0)
    listing_duration_days: Optional[int] = Field(None, ge=1)
    featured_listings_included: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_popular: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)


class PricingPlanCreate(BaseModel):
    plan_name: str = Field(..., min_length=2, max_length=150)
    user_type: UserType
    plan_type: PlanType = PlanType.SUBSCRIPTION
    price: int = Field(..., ge=0, description="Price in minor units")
    country_id: str = Field(..., min_length=2, max_length=2)
    max_properties: Optional[int] = Field(None, ge=0)
    listing_duration_days: Optional[int] = Field(None, ge=1)
    featured_listings_included: int = Field(0, ge=0)
    features: List[str] = Field(default_factory=list)
    is_active: bool = True
    is_popular: bool = False
    display_order: int = Field(0, ge=0)

    @field_validator("country_id")
    @classmethod
    def normalize_country(cls, v):
        return v.strip().upper()


class PricingUpdateResponse(BaseModel):
    success: bool
    message: str
    plan: PricingPlanResponse
