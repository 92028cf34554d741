"""
Payment repositories for payment history and bank-transfer references.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.repositories.base import BaseRepository
from app.models.payment import PaymentHistory, PaymentReference, PaymentStatus, ReferenceStatus
from app.models.user import User
from app.utils.datetime_utils import utc_now
from typing import Optional, List, Tuple
from datetime import datetime
import uuid
import logging

logger = logging.getLogger(__name__)


class PaymentHistoryRepository(BaseRepository[PaymentHistory]):
    """Payment attempts, card and bank transfer."""

    def __init__(self, db: AsyncSession):
        super().__init__(PaymentHistory, db)

    async def get_for_user(self, user_id: uuid.UUID, limit: int = 100) -> List[PaymentHistory]:
        """A user's payments, newest first."""
        result = await self.db.execute(
            select(PaymentHistory)
            .where(PaymentHistory.user_id == user_id)
            .order_by(PaymentHistory.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_by_reference_code(self, reference_code: str) -> Optional[PaymentHistory]:
        """History row recorded for a bank-transfer reference."""
        result = await self.db.execute(
            select(PaymentHistory)
            .where(PaymentHistory.reference_code == reference_code)
            .order_by(PaymentHistory.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_admin(
        self,
        country_id: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Tuple[PaymentHistory, User]], int]:
        """
        Payments joined with their payer for the admin screen.

        Country scoping follows the payer's country.

        Returns:
            Tuple of ((payment, payer) pairs, total_count)
        """
        conditions = []
        if country_id:
            conditions.append(User.country_id == country_id)
        if status:
            conditions.append(PaymentHistory.status == status)

        try:
            count_result = await self.db.execute(
                select(func.count(PaymentHistory.id))
                .join(User, User.id == PaymentHistory.user_id)
                .where(*conditions)
            )
            total = count_result.scalar() or 0

            result = await self.db.execute(
                select(PaymentHistory, User)
                .join(User, User.id == PaymentHistory.user_id)
                .where(*conditions)
                .order_by(PaymentHistory.created_at.desc())
                .offset(skip)
                .limit(limit)
            )
            return [(row[0], row[1]) for row in result.all()], total
        except Exception as e:
            logger.error(f"Failed to list payments: {e}")
            raise


class PaymentReferenceRepository(BaseRepository[PaymentReference]):
    """Bank-transfer reference codes."""

    def __init__(self, db: AsyncSession):
        super().__init__(PaymentReference, db)

    async def get_by_code(self, reference_code: str) -> Optional[PaymentReference]:
        return await self.get_by_field("reference_code", reference_code.strip().upper())

    async def code_exists(self, reference_code: str) -> bool:
        return await self.get_by_code(reference_code) is not None

    async def count_active_pending(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> int:
        """Pending references of a user that have not expired yet."""
        result = await self.db.execute(
            select(func.count(PaymentReference.id)).where(
                PaymentReference.user_id == user_id,
                PaymentReference.status == ReferenceStatus.PENDING,
                PaymentReference.expires_at > (now or utc_now()),
            )
        )
        return result.scalar() or 0
