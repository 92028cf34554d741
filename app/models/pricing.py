"""
Pricing plan model.
One row per plan, scoped to a country and a user type.
"""

from sqlalchemy import String, Integer, Boolean, JSON, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.models.user import UserType
from app.utils.datetime_utils import isoformat
import enum
from typing import List, Optional


class PlanType(str, enum.Enum):
    SUBSCRIPTION = "subscription"
    PROPERTY_LISTING = "property_listing"
    FEATURED_UPGRADE = "featured_upgrade"


class PricingPlan(Base):
    """Per-country, per-user-type plan. Prices are stored in minor units (cents)."""

    __tablename__ = "pricing_plans"

    plan_name: Mapped[str] = mapped_column(String(150), nullable=False)
    user_type: Mapped[UserType] = mapped_column(
        SQLEnum(UserType, name="user_type"),
        nullable=False,
        index=True
    )
    plan_type: Mapped[PlanType] = mapped_column(
        SQLEnum(PlanType, name="plan_type"),
        nullable=False,
        default=PlanType.SUBSCRIPTION
    )
    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Price in minor units of the country currency"
    )
    max_properties: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    listing_duration_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    featured_listings_included: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    features: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    country_id: Mapped[str] = mapped_column(String(2), nullable=False, default="GY", index=True)

    __table_args__ = (
        Index("idx_pricing_country_user_type", "country_id", "user_type", "is_active"),
    )

    @property
    def is_internal(self) -> bool:
        """Plans hidden from public pricing pages."""
        return (
            "Admin" in self.plan_name
            or "+30" in self.plan_name
            or self.plan_type == PlanType.FEATURED_UPGRADE
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "plan_name": self.plan_name,
            "user_type": self.user_type.value,
            "plan_type": self.plan_type.value,
            "price": self.price,
            "max_properties": self.max_properties,
            "listing_duration_days": self.listing_duration_days,
            "featured_listings_included": self.featured_listings_included,
            "features": list(self.features or []),
            "is_active": self.is_active,
            "is_popular": self.is_popular,
            "display_order": self.display_order,
            "country_id": self.country_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
