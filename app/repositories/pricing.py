"""
Pricing plan repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.pricing import PricingPlan
from app.models.user import UserType
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class PricingRepository(BaseRepository[PricingPlan]):
    """Per-country plans."""

    def __init__(self, db: AsyncSession):
        super().__init__(PricingPlan, db)

    async def get_active_plans(
        self,
        country_id: str,
        user_type: Optional[UserType] = None
    ) -> List[PricingPlan]:
        """
        Active plans for a country ordered by display_order.

        Args:
            country_id: Country code
            user_type: Optional account type filter
        """
        conditions = [PricingPlan.country_id == country_id, PricingPlan.is_active.is_(True)]
        if user_type:
            conditions.append(PricingPlan.user_type == user_type)

        result = await self.db.execute(
            select(PricingPlan)
            .where(*conditions)
            .order_by(PricingPlan.display_order.asc(), PricingPlan.price.asc())
        )
        plans = list(result.scalars().all())
        logger.debug(f"Loaded {len(plans)} active plans for {country_id}")
        return plans

    async def get_all_plans(self, country_id: Optional[str] = None) -> List[PricingPlan]:
        """Every plan, active or not, for the admin pricing screen."""
        query = select(PricingPlan)
        if country_id:
            query = query.where(PricingPlan.country_id == country_id)
        result = await self.db.execute(
            query.order_by(PricingPlan.country_id, PricingPlan.user_type, PricingPlan.display_order)
        )
        return list(result.scalars().all())
