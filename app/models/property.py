"""
Property model for sale and rental listings.
Handles listing data, lifecycle status, moderation fields and drafts.
"""

from sqlalchemy import String, Text, Integer, BigInteger, JSON, DateTime, Uuid, Enum as SQLEnum, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.datetime_utils import isoformat, ensure_aware, utc_now
from datetime import datetime
import enum
import uuid
from typing import List, Optional


class PropertyStatus(str, enum.Enum):
    """Lifecycle status of a listing."""
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    UNDER_CONTRACT = "under_contract"
    SOLD = "sold"
    RENTED = "rented"
    REJECTED = "rejected"
    OFF_MARKET = "off_market"


class ListingType(str, enum.Enum):
    SALE = "sale"
    RENT = "rent"


class ListedByType(str, enum.Enum):
    """Who listed the property."""
    OWNER = "owner"
    AGENT = "agent"
    LANDLORD = "landlord"


# Statuses visible to the public
PUBLIC_STATUSES = (PropertyStatus.ACTIVE, PropertyStatus.UNDER_CONTRACT)

# Fields that must be filled before a draft can be published
REQUIRED_LISTING_FIELDS = (
    "title",
    "description",
    "price",
    "property_type",
    "bedrooms",
    "bathrooms",
    "region",
    "city",
)


class Property(Base):
    """
    Property listing.
    Draft rows may leave listing fields empty until they are published.
    """

    __tablename__ = "properties"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    listing_type: Mapped[ListingType] = mapped_column(
        SQLEnum(ListingType, name="listing_type"),
        nullable=False,
        default=ListingType.SALE,
        index=True
    )

    property_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="House, apartment, land, commercial..."
    )

    price: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        index=True,
        comment="Asking price in the listing currency"
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GYD")

    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    house_size_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    region: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)
    neighborhood: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, name="property_status"),
        nullable=False,
        default=PropertyStatus.PENDING,
        index=True
    )

    listed_by_type: Mapped[ListedByType] = mapped_column(
        SQLEnum(ListedByType, name="listed_by_type"),
        nullable=False
    )

    country_id: Mapped[str] = mapped_column(String(2), nullable=False, default="GY", index=True)

    # Moderation
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Drafts
    draft_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Featured placement
    featured_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    __table_args__ = (
        Index("idx_properties_country_status", "country_id", "status"),
        Index("idx_properties_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title}, status={self.status})>"

    @property
    def is_draft(self) -> bool:
        return self.status == PropertyStatus.DRAFT

    @property
    def is_public(self) -> bool:
        return self.status in PUBLIC_STATUSES

    def is_draft_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether a draft has passed its expiry date."""
        if not self.is_draft or self.draft_expires_at is None:
            return False
        return ensure_aware(self.draft_expires_at) < (now or utc_now())

    def is_featured(self, now: Optional[datetime] = None) -> bool:
        return self.featured_until is not None and ensure_aware(self.featured_until) > (now or utc_now())

    def missing_required_fields(self) -> List[str]:
        """List listing fields still empty, in publishing order."""
        missing = []
        for field in REQUIRED_LISTING_FIELDS:
            value = getattr(self, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)
        return missing

    def validate_all(self) -> None:
        """
        Validate numeric listing fields.

        Raises:
            ValueError: If any value is out of range
        """
        if self.price is not None and self.price <= 0:
            raise ValueError("Property price must be greater than 0")
        for field in ("bedrooms", "bathrooms"):
            value = getattr(self, field)
            if value is not None and not (0 <= value <= 50):
                raise ValueError(f"Number of {field} must be between 0 and 50")
        if self.house_size_value is not None and self.house_size_value <= 0:
            raise ValueError("House size must be greater than 0")

    def draft_summary(self) -> str:
        """One-line summary shown in draft lists."""
        parts = [
            self.property_type,
            self.location,
            f"${self.price}" if self.price else None,
        ]
        return " • ".join(part for part in parts if part) or "Incomplete Draft"

    def to_dict(self) -> dict:
        """Convert property to dictionary."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "title": self.title,
            "description": self.description,
            "listing_type": self.listing_type.value,
            "property_type": self.property_type,
            "price": self.price,
            "currency": self.currency,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "house_size_value": self.house_size_value,
            "region": self.region,
            "city": self.city,
            "neighborhood": self.neighborhood,
            "location": self.location,
            "amenities": list(self.amenities or []),
            "status": self.status.value,
            "listed_by_type": self.listed_by_type.value,
            "country_id": self.country_id,
            "rejection_reason": self.rejection_reason,
            "reviewed_by": str(self.reviewed_by) if self.reviewed_by else None,
            "reviewed_at": isoformat(self.reviewed_at),
            "draft_expires_at": isoformat(self.draft_expires_at),
            "featured_until": isoformat(self.featured_until),
            "is_featured": self.is_featured(),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
