"""
Draft listings: autosave, publish and expiry cleanup.
Drafts are Property rows in status "draft" whose listing fields may still be empty.
"""

from typing import Optional, List, Dict, Any
from datetime import timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.models.property import Property, PropertyStatus, ListingType
from app.models.user import User
from app.repositories.property import PropertyRepository
from app.schemas.property import DraftSaveRequest
from app.services.property import ensure_can_list, listed_by_for
from app.utils.datetime_utils import utc_now
from app.utils.permissions import get_user_permissions
from app.utils.exceptions import (
    BadRequestError,
    GoneError,
    PropertyNotFoundError,
    ValidationError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class DraftService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)

    def _expiry(self):
        return utc_now() + timedelta(days=settings.draft_expiry_days)

    async def save_draft(self, data: DraftSaveRequest, current_user: User) -> Property:
        """Create a new draft; each save pushes the expiry date forward."""
        create_data: Dict[str, Any] = data.model_dump(exclude_none=True)
        create_data.setdefault("listing_type", ListingType.SALE)
        create_data.setdefault("amenities", [])
        create_data.update({
            "user_id": current_user.id,
            "status": PropertyStatus.DRAFT,
            "listed_by_type": listed_by_for(current_user),
            "country_id": current_user.country_id,
            "draft_expires_at": self._expiry(),
        })

        try:
            draft = await self.property_repo.create_property(create_data)
        except ValueError as e:
            raise ValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to save draft for {current_user.email}: {e}")
            raise BadRequestError(f"Failed to save draft: {str(e)}")

        logger.info(f"Draft saved by {current_user.email}: {draft.id}")
        return draft

    async def _get_own_draft(self, draft_id: uuid.UUID, current_user: User) -> Property:
        draft = await self.property_repo.get_by_id(draft_id)
        if not draft or not draft.is_draft or not current_user.owns(draft.user_id):
            raise PropertyNotFoundError(str(draft_id))
        return draft

    async def update_draft(self, draft_id: uuid.UUID, data: DraftSaveRequest, current_user: User) -> Property:
        """
        Autosave changes to an existing draft.

        Raises:
            PropertyNotFoundError: If the draft doesn't exist or isn't the caller's
            GoneError: If the draft has expired
        """
        draft = await self._get_own_draft(draft_id, current_user)
        if draft.is_draft_expired():
            raise GoneError("Draft has expired")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        try:
            Property(**changes).validate_all()
        except ValueError as e:
            raise ValidationError(str(e))
        changes["draft_expires_at"] = self._expiry()

        return await self.property_repo.update(draft.id, changes)

    async def list_drafts(self, current_user: User) -> List[Dict[str, Any]]:
        """Caller's drafts in the shape the draft picker shows."""
        drafts = await self.property_repo.get_drafts(current_user.id)
        return [
            {
                "id": str(draft.id),
                "title": draft.title or "Untitled Draft",
                "summary": draft.draft_summary(),
                "last_saved": draft.updated_at,
                "created_at": draft.created_at,
                "expires_at": draft.draft_expires_at,
                "missing_fields": draft.missing_required_fields(),
            }
            for draft in drafts
        ]

    async def publish_draft(self, draft_id: uuid.UUID, current_user: User) -> Property:
        """
        Turn a complete draft into a listing.
        Admin drafts go live; everyone else's go to the moderation queue.

        Raises:
            ForbiddenError: If the user type may not publish
            GoneError: If the draft has expired
            ValidationError: If required listing fields are missing
        """
        ensure_can_list(current_user)
        draft = await self._get_own_draft(draft_id, current_user)

        if draft.is_draft_expired():
            raise GoneError("Draft has expired and cannot be published")

        missing = draft.missing_required_fields()
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                field_errors=[{"field": field, "message": "Field required"} for field in missing]
            )

        is_admin = get_user_permissions(current_user).is_admin
        changes: Dict[str, Any] = {
            "status": PropertyStatus.ACTIVE if is_admin else PropertyStatus.PENDING,
            "draft_expires_at": None,
        }
        if is_admin:
            changes["reviewed_by"] = current_user.id
            changes["reviewed_at"] = utc_now()

        published = await self.property_repo.update(draft.id, changes, allow_none=True)
        logger.info(f"Draft {draft.id} published by {current_user.email} as {published.status.value}")
        return published

    async def cleanup_expired(self, current_user: User, now=None) -> int:
        """
        Delete expired drafts: the caller's own, or every user's for a super admin.
        """
        scope: Optional[uuid.UUID] = None if current_user.is_super_admin else current_user.id
        return await self.property_repo.delete_expired_drafts(user_id=scope, now=now)
