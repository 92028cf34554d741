"""
Property repository with listing search, owner listings, moderation queue and drafts.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, or_, delete, case
from app.repositories.base import BaseRepository
from app.models.property import Property, PropertyStatus, ListingType, PUBLIC_STATUSES
from app.utils.datetime_utils import utc_now
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertySearchFilters:
    """
    Public search criteria.
    Every field is optional; None means "don't filter".
    """

    def __init__(
        self,
        country_id: Optional[str] = None,
        listing_type: Optional[ListingType] = None,
        region: Optional[str] = None,
        city: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        bedrooms: Optional[int] = None,
        property_type: Optional[str] = None,
        query: Optional[str] = None
    ):
        self.country_id = country_id
        self.listing_type = listing_type
        self.region = region
        self.city = city
        self.min_price = min_price
        self.max_price = max_price
        self.bedrooms = bedrooms
        self.property_type = property_type
        self.query = query


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a property after validating numeric fields.

        Raises:
            ValueError: If validation fails
        """
        Property(**property_data).validate_all()
        created_property = await self.create(property_data)
        logger.info(f"Created property: {created_property.title} (ID: {created_property.id}, status: {created_property.status.value})")
        return created_property

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """Translate search filters into SQLAlchemy conditions."""
        conditions = [Property.status.in_(PUBLIC_STATUSES)]

        if filters.country_id:
            conditions.append(Property.country_id == filters.country_id)
        if filters.listing_type:
            conditions.append(Property.listing_type == filters.listing_type)
        if filters.region:
            conditions.append(Property.region.ilike(f"%{filters.region}%"))
        if filters.city:
            conditions.append(Property.city.ilike(f"%{filters.city}%"))
        if filters.property_type:
            conditions.append(Property.property_type == filters.property_type)
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)
        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.bedrooms)
        if filters.query:
            term = f"%{filters.query}%"
            conditions.append(or_(Property.title.ilike(term), Property.description.ilike(term)))

        return conditions

    async def search_public(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Search publicly visible listings.
        Listings with a running featured placement come first, then newest first.

        Returns:
            Tuple of (properties, total_count)
        """
        conditions = self._build_filter_conditions(filters)
        try:
            count_result = await self.db.execute(select(func.count(Property.id)).where(and_(*conditions)))
            total = count_result.scalar() or 0

            result = await self.db.execute(
                select(Property)
                .where(and_(*conditions))
                .order_by(
                    case((Property.featured_until > utc_now(), 0), else_=1),
                    Property.created_at.desc()
                )
                .offset(skip)
                .limit(limit)
            )
            properties = list(result.scalars().all())
            logger.debug(f"Property search returned {len(properties)} of {total} total results")
            return properties, total
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    async def get_by_owner(
        self,
        user_id: uuid.UUID,
        status: Optional[PropertyStatus] = None,
        include_drafts: bool = False
    ) -> List[Property]:
        """Listings owned by a user, newest first."""
        conditions = [Property.user_id == user_id]
        if status is not None:
            conditions.append(Property.status == status)
        elif not include_drafts:
            conditions.append(Property.status != PropertyStatus.DRAFT)

        result = await self.db.execute(
            select(Property).where(*conditions).order_by(Property.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_featured_by_owner(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> List[Property]:
        """Owner's listings whose featured placement is still running, ending soonest first."""
        result = await self.db.execute(
            select(Property)
            .where(Property.user_id == user_id, Property.featured_until > (now or utc_now()))
            .order_by(Property.featured_until.asc())
        )
        return list(result.scalars().all())

    async def get_moderation_queue(self, country_id: Optional[str] = None) -> List[Property]:
        """
        Pending listings awaiting review, oldest first.

        Args:
            country_id: Restrict to one country (None for all)
        """
        conditions = [Property.status == PropertyStatus.PENDING]
        if country_id:
            conditions.append(Property.country_id == country_id)

        result = await self.db.execute(
            select(Property).where(*conditions).order_by(Property.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_drafts(self, user_id: uuid.UUID) -> List[Property]:
        """A user's drafts, most recently saved first."""
        result = await self.db.execute(
            select(Property)
            .where(Property.user_id == user_id, Property.status == PropertyStatus.DRAFT)
            .order_by(Property.updated_at.desc())
        )
        return list(result.scalars().all())

    async def delete_expired_drafts(
        self,
        user_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None
    ) -> int:
        """
        Delete drafts past their expiry date.

        Args:
            user_id: Only this user's drafts (None for every user)
            now: Reference time, defaults to the current time

        Returns:
            Number of deleted drafts
        """
        conditions = [
            Property.status == PropertyStatus.DRAFT,
            Property.draft_expires_at.is_not(None),
            Property.draft_expires_at < (now or utc_now()),
        ]
        if user_id is not None:
            conditions.append(Property.user_id == user_id)

        try:
            result = await self.db.execute(
                delete(Property).where(*conditions).execution_options(synchronize_session="fetch")
            )
            await self.db.commit()
            deleted = result.rowcount or 0
            logger.info(f"Deleted {deleted} expired drafts")
            return deleted
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete expired drafts: {e}")
            raise
