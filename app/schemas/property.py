"""
Pydantic schemas for property requests and responses.
Handles listing CRUD, status changes, drafts and search results.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from app.models.property import PropertyStatus, ListingType, ListedByType


def _clean_text(v):
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Field cannot be empty")
    return v


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=5,
        max_length=255,
        description="Property listing title",
        examples=["Spacious 3BR Family Home in Bel Air"]
    )
    description: str = Field(
        ...,
        min_length=20,
        max_length=5000,
        description="Detailed property description"
    )
    listing_type: ListingType = Field(ListingType.SALE, description="For sale or for rent")
    property_type: str = Field(..., min_length=2, max_length=50, examples=["house"])
    price: int = Field(..., gt=0, le=10_000_000_000, description="Price in the listing currency")
    currency: str = Field("GYD", min_length=3, max_length=3)
    bedrooms: int = Field(..., ge=0, le=50)
    bathrooms: int = Field(..., ge=0, le=50)
    house_size_value: Optional[int] = Field(None, gt=0, le=1_000_000)
    region: str = Field(..., min_length=2, max_length=120, examples=["Demerara-Mahaica"])
    city: str = Field(..., min_length=2, max_length=120, examples=["Georgetown"])
    neighborhood: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=255, description="Street address")
    amenities: List[str] = Field(default_factory=list)

    @field_validator("title", "description", "property_type", "region", "city")
    @classmethod
    def validate_text(cls, v):
        """Strip text fields and reject blanks."""
        return _clean_text(v)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper()


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Spacious 3BR Family Home in Bel Air",
                "description": "Two-storey concrete home with a large yard, close to schools and shopping.",
                "listing_type": "sale",
                "property_type": "house",
                "price": 45000000,
                "bedrooms": 3,
                "bathrooms": 2,
                "region": "Demerara-Mahaica",
                "city": "Georgetown",
                "neighborhood": "Bel Air Park",
                "amenities": ["parking", "generator"],
            }
        }
    }


class PropertyUpdate(BaseModel):
    """
    Schema for updating an existing property.
    Status changes go through the status endpoint instead.
    """

    title: Optional[str] = Field(None, min_length=5, max_length=255)
    description: Optional[str] = Field(None, min_length=20, max_length=5000)
    listing_type: Optional[ListingType] = None
    property_type: Optional[str] = Field(None, min_length=2, max_length=50)
    price: Optional[int] = Field(None, gt=0, le=10_000_000_000)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    house_size_value: Optional[int] = Field(None, gt=0, le=1_000_000)
    region: Optional[str] = Field(None, min_length=2, max_length=120)
    city: Optional[str] = Field(None, min_length=2, max_length=120)
    neighborhood: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=255)
    amenities: Optional[List[str]] = None

    @field_validator("title", "description", "property_type", "region", "city")
    @classmethod
    def validate_text(cls, v):
        return _clean_text(v)


class PropertyResponse(BaseModel):
    """Schema for property response."""

    id: str
    user_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    listing_type: ListingType
    property_type: Optional[str] = None
    price: Optional[int] = None
    currency: str
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    house_size_value: Optional[int] = None
    region: Optional[str] = None
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    location: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    status: PropertyStatus
    listed_by_type: ListedByType
    country_id: str
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    draft_expires_at: Optional[datetime] = None
    featured_until: Optional[datetime] = None
    is_featured: bool = False
    created_at: datetime
    updated_at: datetime


class PropertyListResponse(BaseModel):
    """Schema for paginated property list response."""

    properties: List[PropertyResponse]
    total: int = Field(..., description="Total number of properties matching the criteria")
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool
    country_id: Optional[str] = Field(None, description="Country the results are scoped to")


class PropertyStatusChangeRequest(BaseModel):
    """Request to move a listing to a new lifecycle status."""

    status: PropertyStatus = Field(..., description="Requested status", examples=["active"])
    rejection_reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def require_rejection_reason(self):
        """Rejections must explain themselves to the lister."""
        if self.status == PropertyStatus.REJECTED and not (self.rejection_reason and self.rejection_reason.strip()):
            raise ValueError("A rejection reason is required when rejecting a property")
        return self


class PropertyStatusChangeResponse(BaseModel):
    success: bool
    message: str
    property: PropertyResponse


class DraftSaveRequest(BaseModel):
    """Autosaved draft; every listing field is optional."""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    listing_type: Optional[ListingType] = None
    property_type: Optional[str] = Field(None, max_length=50)
    price: Optional[int] = Field(None, gt=0, le=10_000_000_000)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    house_size_value: Optional[int] = Field(None, gt=0, le=1_000_000)
    region: Optional[str] = Field(None, max_length=120)
    city: Optional[str] = Field(None, max_length=120)
    neighborhood: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=255)
    amenities: Optional[List[str]] = None


class DraftSummary(BaseModel):
    """Entry in the caller's draft list."""

    id: str
    title: str
    summary: str
    last_saved: Optional[datetime] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    missing_fields: List[str] = Field(default_factory=list)


class DraftListResponse(BaseModel):
    drafts: List[DraftSummary]
    total: int


class DraftCleanupResponse(BaseModel):
    success: bool = True
    deleted_count: int


class ModerationQueueResponse(BaseModel):
    """Pending listings awaiting admin review."""

    properties: List[PropertyResponse]
    total: int
    country_filter: Optional[str] = None
