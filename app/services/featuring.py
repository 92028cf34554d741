"""
Featured listing placement.

Listing owners spend one featured credit per placement; credits come with plans
that include featured listings and with verified featured-upgrade payments.
Admins can feature listings in their country without spending credits.
"""

from typing import Optional, List, Dict, Any
from datetime import timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.models.pricing import PlanType
from app.models.user import User
from app.repositories.pricing import PricingRepository
from app.repositories.property import PropertyRepository
from app.services.audit import AuditService
from app.services.pricing import plan_to_response
from app.utils.datetime_utils import utc_now
from app.utils.permissions import get_user_permissions, can_access_country_data
from app.utils.exceptions import (
    BadRequestError,
    ConflictError,
    CountryAccessError,
    InsufficientCreditsError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    ValidationError
)
import uuid
import logging

logger = logging.getLogger(__name__)

CREDITS_PER_PLACEMENT = 1


class FeaturingService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.pricing_repo = PricingRepository(db_session)
        self.audit = AuditService(db_session)

    async def get_prices(self, country_id: str) -> List[Dict[str, Any]]:
        """Active featured-upgrade plans for a country."""
        plans = await self.pricing_repo.get_active_plans(country_id)
        return [plan_to_response(plan) for plan in plans if plan.plan_type == PlanType.FEATURED_UPGRADE]

    async def get_credits(self, current_user: User) -> Dict[str, Any]:
        featured = await self.property_repo.get_featured_by_owner(current_user.id)
        return {
            "featured_credits": current_user.featured_credits or 0,
            "featured_properties": featured,
        }

    def _duration(self, duration_days: Optional[int]) -> int:
        days = duration_days or settings.featured_listing_days
        if days > settings.featured_max_days:
            raise ValidationError(
                f"Featured placement cannot exceed {settings.featured_max_days} days",
                field_errors=[{"field": "duration_days", "message": f"Must be at most {settings.featured_max_days}"}]
            )
        return days

    async def feature_property(
        self,
        property_id: uuid.UUID,
        current_user: User,
        duration_days: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Start a featured placement for a live listing.

        Returns:
            Dict with success, message, the property, featured_until and the credits left

        Raises:
            PropertyNotFoundError: If the listing doesn't exist
            PropertyOwnershipError: If the caller is neither the owner nor an admin
            CountryAccessError: If an admin targets another country's listing
            BadRequestError: If the listing is not live
            ConflictError: If a placement is already running
            InsufficientCreditsError: If the owner has no credits left
        """
        days = self._duration(duration_days)
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise PropertyNotFoundError(str(property_id))

        permissions = get_user_permissions(current_user)
        is_owner = current_user.owns(property_obj.user_id)
        admin_placement = permissions.is_admin and not is_owner
        if admin_placement and not can_access_country_data(permissions, property_obj.country_id):
            raise CountryAccessError(property_obj.country_id)
        if not is_owner and not admin_placement:
            raise PropertyOwnershipError()

        if not property_obj.is_public:
            raise BadRequestError("Only live listings can be featured")

        now = utc_now()
        if property_obj.is_featured(now):
            raise ConflictError("Property already has an active featured placement")

        spends_credit = not permissions.is_admin
        available = current_user.featured_credits or 0
        if spends_credit and available < CREDITS_PER_PLACEMENT:
            raise InsufficientCreditsError(available, CREDITS_PER_PLACEMENT)

        try:
            property_obj.featured_until = now + timedelta(days=days)
            if spends_credit:
                current_user.featured_credits = available - CREDITS_PER_PLACEMENT
            await self.db.commit()
            await self.db.refresh(property_obj)
            await self.db.refresh(current_user)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to feature property {property_id}: {e}")
            raise BadRequestError(f"Failed to feature property: {str(e)}")

        logger.info(
            f"Property {property_obj.id} featured for {days} days by {current_user.email}"
            f"{'' if spends_credit else ' (admin placement)'}"
        )
        if admin_placement:
            await self.audit.record(current_user, "property_featured", "property", property_obj.id, {
                "duration_days": days,
                "featured_until": property_obj.featured_until,
                "country_id": property_obj.country_id,
            })

        return {
            "success": True,
            "message": f"Property featured for {days} days",
            "property": property_obj,
            "featured_until": property_obj.featured_until,
            "credits_remaining": current_user.featured_credits if spends_credit else None,
        }

