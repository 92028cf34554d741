"""
Agent vetting repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.repositories.base import BaseRepository
from app.models.vetting import AgentVetting, VettingStatus
from typing import Optional, List, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class VettingRepository(BaseRepository[AgentVetting]):
    """Applications submitted by agents, listed per country for review."""

    def __init__(self, db: AsyncSession):
        super().__init__(AgentVetting, db)

    async def get_by_user_id(self, user_id: uuid.UUID) -> Optional[AgentVetting]:
        return await self.get_by_field("user_id", user_id)

    async def list_applications(
        self,
        country_id: Optional[str] = None,
        status: Optional[VettingStatus] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[AgentVetting], int]:
        """
        Applications for the admin review screen, oldest submission first.

        Args:
            country_id: Restrict to a country (None for all)
            status: Optional status filter

        Returns:
            Tuple of (applications, total_count)
        """
        conditions = []
        if country_id:
            conditions.append(AgentVetting.country_id == country_id)
        if status:
            conditions.append(AgentVetting.status == status)

        try:
            count_result = await self.db.execute(select(func.count(AgentVetting.id)).where(*conditions))
            total = count_result.scalar() or 0

            result = await self.db.execute(
                select(AgentVetting)
                .where(*conditions)
                .order_by(AgentVetting.submitted_at.asc(), AgentVetting.created_at.asc())
                .offset(skip)
                .limit(limit)
            )
            return list(result.scalars().all()), total
        except Exception as e:
            logger.error(f"Failed to list vetting applications: {e}")
            raise
