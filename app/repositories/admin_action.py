"""
Admin audit log repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.admin_action import AdminAction
from typing import List
import logging

logger = logging.getLogger(__name__)


class AdminActionRepository(BaseRepository[AdminAction]):

    def __init__(self, db: AsyncSession):
        super().__init__(AdminAction, db)

    async def get_for_target(self, target_type: str, target_id: str) -> List[AdminAction]:
        """Audit trail for one row, newest first."""
        result = await self.db.execute(
            select(AdminAction)
            .where(AdminAction.target_type == target_type, AdminAction.target_id == target_id)
            .order_by(AdminAction.created_at.desc())
        )
        return list(result.scalars().all())
