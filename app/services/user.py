"""
Account management service: admin listings and landlord/FSBO account approval.
"""

from typing import Optional, Tuple, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User, UserType, ApprovalStatus
from app.repositories.user import UserRepository
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.permissions import get_user_permissions, can_access_country_data, get_country_filter
from app.utils.exceptions import (
    BadRequestError,
    CountryAccessError,
    InsufficientPermissionsError,
    NotFoundError,
    ValidationError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Admin-side account operations, scoped to the admin's country."""

    def __init__(self, db_session: AsyncSession, notifier: Optional[NotificationService] = None):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.audit = AuditService(db_session)
        self.notifier = notifier or NotificationService()

    async def list_users(
        self,
        admin: User,
        user_type: Optional[UserType] = None,
        approval_status: Optional[ApprovalStatus] = None,
        query: Optional[str] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[User], int]:
        permissions = get_user_permissions(admin)
        if not permissions.can_view_users:
            raise InsufficientPermissionsError("view users")

        return await self.user_repo.search_users(
            country_id=get_country_filter(permissions),
            user_type=user_type,
            approval_status=approval_status,
            query=query,
            skip=(page - 1) * page_size,
            limit=page_size,
        )

    async def _get_account_for_decision(self, user_id: uuid.UUID, admin: User) -> User:
        permissions = get_user_permissions(admin)
        if not permissions.can_view_users or not permissions.can_approve_properties:
            raise InsufficientPermissionsError("approve accounts")

        account = await self.user_repo.get_by_id(user_id)
        if not account:
            raise NotFoundError("User", str(user_id))

        if not can_access_country_data(permissions, account.country_id):
            raise CountryAccessError(account.country_id)

        if not account.requires_account_approval:
            raise BadRequestError("Only landlord and FSBO accounts go through account approval")
        return account

    async def approve_account(self, user_id: uuid.UUID, admin: User, notes: Optional[str] = None) -> User:
        """
        Approve a landlord or FSBO account.

        Raises:
            CountryAccessError: If the account belongs to another country
            BadRequestError: If the account type is not approvable
        """
        account = await self._get_account_for_decision(user_id, admin)
        previous_status = account.approval_status

        updated = await self.user_repo.update(account.id, {
            "approval_status": ApprovalStatus.APPROVED,
            "approval_notes": notes,
            "rejection_reason": None,
            "approved_by": admin.id,
            "approval_date": utc_now(),
            "is_verified": True,
        }, allow_none=True)

        logger.info(f"Account approved by {admin.email}: {updated.email}")
        await self.audit.record(admin, "account_approved", "user", updated.id, {
            "previous_status": previous_status,
            "new_status": updated.approval_status,
            "user_type": updated.user_type,
        })
        await self.notifier.send_template(
            updated.email,
            "owner_approval",
            first_name=updated.first_name,
            user_type=updated.user_type.value,
            country_id=updated.country_id,
        )
        return updated

    async def reject_account(self, user_id: uuid.UUID, admin: User, reason: Optional[str]) -> User:
        """Reject a landlord or FSBO account; a reason is required."""
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required")

        account = await self._get_account_for_decision(user_id, admin)
        previous_status = account.approval_status

        updated = await self.user_repo.update(account.id, {
            "approval_status": ApprovalStatus.REJECTED,
            "rejection_reason": reason.strip(),
            "approved_by": admin.id,
            "approval_date": utc_now(),
        })

        logger.info(f"Account rejected by {admin.email}: {updated.email}")
        await self.audit.record(admin, "account_rejected", "user", updated.id, {
            "previous_status": previous_status,
            "new_status": updated.approval_status,
            "rejection_reason": updated.rejection_reason,
        })
        await self.notifier.send_template(
            updated.email,
            "owner_rejection",
            first_name=updated.first_name,
            user_type=updated.user_type.value,
            reason=updated.rejection_reason,
            country_id=updated.country_id,
        )
        return updated
