"""
Property service for listing CRUD, public search, moderation and the status workflow.
"""

from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.property import Property, PropertyStatus, ListedByType
from app.models.user import User, UserType, ApprovalStatus
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.user import UserRepository
from app.schemas.property import PropertyCreate, PropertyUpdate
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.permissions import (
    AdminPermissions,
    get_user_permissions,
    can_access_country_data,
    get_country_filter
)
from app.utils.status_workflow import (
    can_transition,
    is_moderation_transition,
    is_owner_only_transition,
    transition_message
)
from app.utils.exceptions import (
    BadRequestError,
    CountryAccessError,
    ForbiddenError,
    InsufficientPermissionsError,
    InvalidStatusTransitionError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    ValidationError
)
import uuid
import logging

logger = logging.getLogger(__name__)

LISTING_USER_TYPES = (UserType.ADMIN, UserType.AGENT, UserType.LANDLORD, UserType.OWNER)


def listed_by_for(user: User) -> ListedByType:
    """Admins list as agents."""
    if user.user_type == UserType.LANDLORD:
        return ListedByType.LANDLORD
    if user.user_type == UserType.OWNER:
        return ListedByType.OWNER
    return ListedByType.AGENT


def ensure_can_list(user: User) -> None:
    """
    Check that a user may put listings in front of moderators.

    Raises:
        InsufficientPermissionsError: For account types that cannot list
        ForbiddenError: For agents awaiting vetting or unapproved landlord/FSBO accounts
    """
    if user.user_type not in LISTING_USER_TYPES:
        raise InsufficientPermissionsError("publish properties")
    if user.user_type == UserType.ADMIN:
        return
    if user.user_type == UserType.AGENT and not user.is_verified:
        raise ForbiddenError("Your agent application must be approved before listing properties")
    if user.requires_account_approval and user.approval_status != ApprovalStatus.APPROVED:
        raise ForbiddenError("Your account must be approved before listing properties")


class PropertyService:
    """
    Listing operations.
    Every status change goes through the transition table in app.utils.status_workflow.
    """

    def __init__(self, db_session: AsyncSession, notifier: Optional[NotificationService] = None):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.audit = AuditService(db_session)
        self.notifier = notifier or NotificationService()

    async def create_property(self, property_data: PropertyCreate, current_user: User) -> Property:
        """
        Create a listing. Admin listings go live immediately; everything else waits for review.

        Raises:
            ForbiddenError: If the user may not list yet
            ValidationError: If property data is invalid
        """
        ensure_can_list(current_user)
        is_admin = get_user_permissions(current_user).is_admin

        create_data = property_data.model_dump()
        create_data.update({
            "user_id": current_user.id,
            "listed_by_type": listed_by_for(current_user),
            "country_id": current_user.country_id,
            "status": PropertyStatus.ACTIVE if is_admin else PropertyStatus.PENDING,
        })
        if is_admin:
            create_data["reviewed_by"] = current_user.id
            create_data["reviewed_at"] = utc_now()

        try:
            property_obj = await self.property_repo.create_property(create_data)
        except ValueError as e:
            raise ValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to create property for user {current_user.id}: {e}")
            raise BadRequestError(f"Failed to create property: {str(e)}")

        logger.info(f"Property created by {current_user.email}: {property_obj.title} ({property_obj.status.value})")
        return property_obj

    async def _get_or_404(self, property_id: uuid.UUID) -> Property:
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise PropertyNotFoundError(str(property_id))
        return property_obj

    def _admin_can_manage(self, permissions: AdminPermissions, property_obj: Property) -> bool:
        return (
            permissions.can_approve_properties
            and can_access_country_data(permissions, property_obj.country_id)
        )

    def _ensure_can_manage(self, property_obj: Property, user: User, action: str) -> AdminPermissions:
        """Owner, or an admin with access to the listing's country."""
        permissions = get_user_permissions(user)
        if user.owns(property_obj.user_id):
            return permissions
        if permissions.is_admin:
            if not can_access_country_data(permissions, property_obj.country_id):
                raise CountryAccessError(property_obj.country_id)
            if self._admin_can_manage(permissions, property_obj):
                return permissions
        raise InsufficientPermissionsError(f"{action} this property")

    async def get_property(self, property_id: uuid.UUID, current_user: Optional[User] = None) -> Property:
        """
        Public listings are visible to everyone; other statuses only to the owner
        or an admin of the listing's country.
        """
        property_obj = await self._get_or_404(property_id)
        if property_obj.is_public:
            return property_obj

        if current_user is None:
            raise PropertyNotFoundError(str(property_id))
        if current_user.owns(property_obj.user_id):
            return property_obj
        if self._admin_can_manage(get_user_permissions(current_user), property_obj):
            return property_obj
        raise ForbiddenError("You don't have permission to view this property")

    async def update_property(
        self,
        property_id: uuid.UUID,
        update_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Edit listing fields. Status is changed through change_status.

        Raises:
            PropertyNotFoundError: If the listing doesn't exist
            InsufficientPermissionsError: If the user may not edit it
        """
        property_obj = await self._get_or_404(property_id)
        self._ensure_can_manage(property_obj, current_user, "update")

        changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise ValidationError("No valid fields provided for update")

        try:
            Property(**changes).validate_all()
        except ValueError as e:
            raise ValidationError(str(e))

        try:
            updated = await self.property_repo.update(property_id, changes)
        except Exception as e:
            logger.error(f"Failed to update property {property_id}: {e}")
            raise BadRequestError(f"Failed to update property: {str(e)}")

        logger.info(f"Property updated by {current_user.email}: {property_id}")
        return updated

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> bool:
        property_obj = await self._get_or_404(property_id)
        permissions = self._ensure_can_manage(property_obj, current_user, "delete")
        title, owner_id, status = property_obj.title, property_obj.user_id, property_obj.status

        try:
            deleted = await self.property_repo.delete(property_id)
        except Exception as e:
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise BadRequestError(f"Failed to delete property: {str(e)}")

        logger.info(f"Property deleted by {current_user.email}: {property_id}")
        if permissions.is_admin and owner_id != current_user.id:
            await self.audit.record(current_user, "property_deleted", "property", property_id, {
                "title": title,
                "previous_status": status,
            })
        return deleted

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Property], int]:
        """Public search over active and under-contract listings."""
        if filters.min_price is not None and filters.max_price is not None and filters.min_price > filters.max_price:
            raise ValidationError("Minimum price cannot be greater than maximum price")

        try:
            return await self.property_repo.search_public(filters, skip=(page - 1) * page_size, limit=page_size)
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise BadRequestError(f"Failed to search properties: {str(e)}")

    async def get_my_properties(self, current_user: User, status: Optional[PropertyStatus] = None) -> List[Property]:
        return await self.property_repo.get_by_owner(current_user.id, status=status, include_drafts=True)

    async def get_moderation_queue(self, admin: User) -> Tuple[List[Property], Optional[str]]:
        """
        Pending listings for an admin's country (all countries for super admins).

        Returns:
            Tuple of (properties, country_filter)
        """
        permissions = get_user_permissions(admin)
        if not permissions.can_approve_properties:
            raise InsufficientPermissionsError("review properties")

        country_filter = get_country_filter(permissions)
        return await self.property_repo.get_moderation_queue(country_filter), country_filter

    def _authorize_transition(
        self,
        property_obj: Property,
        requested: PropertyStatus,
        actor: User,
        permissions: AdminPermissions
    ) -> None:
        current = property_obj.status
        is_owner = actor.owns(property_obj.user_id)

        if not is_owner and not permissions.is_admin:
            raise PropertyOwnershipError()

        if permissions.is_admin and not is_owner and not can_access_country_data(permissions, property_obj.country_id):
            raise CountryAccessError(property_obj.country_id)

        if current == requested or not can_transition(current, requested):
            raise InvalidStatusTransitionError(current.value, requested.value)

        if is_moderation_transition(current, requested):
            allowed = (
                permissions.can_approve_properties if requested == PropertyStatus.ACTIVE
                else permissions.can_reject_properties
            )
            if not allowed or not can_access_country_data(permissions, property_obj.country_id):
                raise InsufficientPermissionsError(
                    "approve properties" if requested == PropertyStatus.ACTIVE else "reject properties"
                )
        elif is_owner_only_transition(current, requested) and not is_owner:
            raise PropertyOwnershipError("Only the listing owner can resubmit this property")

    async def change_status(
        self,
        property_id: uuid.UUID,
        new_status: PropertyStatus,
        actor: User,
        rejection_reason: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Move a listing to a new status.

        Returns:
            Dict with success, property and a human-readable message

        Raises:
            PropertyNotFoundError: If the listing doesn't exist
            ForbiddenError: If the actor lacks the role, the permission or country access
            InvalidStatusTransitionError: If the transition is not allowed
            ValidationError: If a rejection has no reason or a draft is incomplete
        """
        property_obj = await self._get_or_404(property_id)
        permissions = get_user_permissions(actor)
        self._authorize_transition(property_obj, new_status, actor, permissions)

        previous = property_obj.status
        changes: Dict[str, Any] = {"status": new_status}

        if new_status == PropertyStatus.REJECTED:
            if not rejection_reason or not rejection_reason.strip():
                raise ValidationError("A rejection reason is required when rejecting a property")
            changes["rejection_reason"] = rejection_reason.strip()

        if new_status in (PropertyStatus.ACTIVE, PropertyStatus.REJECTED):
            changes["reviewed_by"] = actor.id
            changes["reviewed_at"] = utc_now()

        if new_status == PropertyStatus.PENDING:
            if previous == PropertyStatus.DRAFT:
                ensure_can_list(actor)
                missing = property_obj.missing_required_fields()
                if missing:
                    raise ValidationError(
                        f"Missing required fields: {', '.join(missing)}",
                        field_errors=[{"field": f, "message": "Field required"} for f in missing]
                    )
                changes["draft_expires_at"] = None
            changes["rejection_reason"] = None

        try:
            updated = await self.property_repo.update(property_id, changes, allow_none=True)
        except Exception as e:
            logger.error(f"Failed to change status of property {property_id}: {e}")
            raise BadRequestError(f"Failed to change property status: {str(e)}")

        logger.info(f"Property {property_id} status {previous.value} -> {new_status.value} by {actor.email}")

        if permissions.is_admin and not actor.owns(updated.user_id):
            action_type = "property_status_changed"
            if is_moderation_transition(previous, new_status):
                action_type = "property_approved" if new_status == PropertyStatus.ACTIVE else "property_rejected"
            await self.audit.record(actor, action_type, "property", updated.id, {
                "previous_status": previous,
                "new_status": new_status,
                "rejection_reason": updated.rejection_reason,
                "country_id": updated.country_id,
            })

        if is_moderation_transition(previous, new_status):
            await self._notify_moderation_result(updated)

        return {
            "success": True,
            "property": updated,
            "message": transition_message(new_status, previous),
        }

    async def _notify_moderation_result(self, property_obj: Property) -> None:
        try:
            owner = await self.user_repo.get_by_id(property_obj.user_id)
        except Exception as e:
            logger.warning(f"Could not load owner of property {property_obj.id} for notification: {e}")
            return
        if not owner:
            return

        if property_obj.status == PropertyStatus.ACTIVE:
            await self.notifier.send_template(
                owner.email,
                "property_approval",
                property_title=property_obj.title or "your property",
                property_id=str(property_obj.id),
            )
        else:
            await self.notifier.send_template(
                owner.email,
                "property_rejection",
                property_title=property_obj.title or "your property",
                reason=property_obj.rejection_reason,
            )
