"""
Agent vetting service: admin review decisions and applicant resubmission.
"""

from typing import Optional, Tuple, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User, UserType, ApprovalStatus
from app.models.vetting import AgentVetting, VettingStatus
from app.repositories.user import UserRepository
from app.repositories.vetting import VettingRepository
from app.schemas.vetting import VettingUpdateRequest
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.permissions import get_user_permissions, can_access_country_data, get_country_filter
from app.utils.exceptions import (
    APIException,
    BadRequestError,
    CountryAccessError,
    InsufficientPermissionsError,
    NotFoundError,
    ValidationError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class VettingService:
    """Country-scoped review of agent applications."""

    def __init__(self, db_session: AsyncSession, notifier: Optional[NotificationService] = None):
        self.db = db_session
        self.vetting_repo = VettingRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.audit = AuditService(db_session)
        self.notifier = notifier or NotificationService()

    async def list_applications(
        self,
        admin: User,
        status: Optional[VettingStatus] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[AgentVetting], int, Optional[str]]:
        """
        Applications visible to an admin.

        Returns:
            Tuple of (applications, total, country_filter)
        """
        permissions = get_user_permissions(admin)
        if not permissions.can_approve_agents:
            raise InsufficientPermissionsError("review agent applications")

        country_filter = get_country_filter(permissions)
        applications, total = await self.vetting_repo.list_applications(
            country_id=country_filter,
            status=status,
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return applications, total, country_filter

    async def _get_reviewable(self, application_id: uuid.UUID, admin: User) -> Tuple[AgentVetting, User]:
        permissions = get_user_permissions(admin)
        if not permissions.can_approve_agents:
            raise InsufficientPermissionsError("review agent applications")

        application = await self.vetting_repo.get_by_id(application_id)
        if not application:
            raise NotFoundError("Agent application", str(application_id))

        if not can_access_country_data(permissions, application.country_id):
            raise CountryAccessError(application.country_id)

        if not application.is_reviewable:
            raise BadRequestError(
                f"Application is {application.status.value} and cannot be reviewed"
            )

        applicant = await self.user_repo.get_by_id(application.user_id)
        if not applicant:
            raise NotFoundError("User", str(application.user_id))
        return application, applicant

    async def _save(self, *objects) -> None:
        try:
            await self.db.commit()
            for obj in objects:
                await self.db.refresh(obj)
        except Exception:
            await self.db.rollback()
            raise

    async def approve(self, application_id: uuid.UUID, admin: User, notes: Optional[str] = None) -> AgentVetting:
        """
        Approve an application and verify the agent account.

        Raises:
            InsufficientPermissionsError: If the admin cannot approve agents
            CountryAccessError: If the application belongs to another country
            BadRequestError: If the application was already decided
        """
        application, applicant = await self._get_reviewable(application_id, admin)
        previous_status = application.status

        try:
            now = utc_now()
            application.status = VettingStatus.APPROVED
            application.reviewed_at = now
            application.reviewed_by = admin.id
            application.rejection_reason = None
            if notes:
                application.admin_notes = notes
            applicant.is_verified = True
            applicant.approval_status = ApprovalStatus.APPROVED
            applicant.approved_by = admin.id
            applicant.approval_date = now
            await self._save(application, applicant)
        except Exception as e:
            logger.error(f"Failed to approve agent application {application_id}: {e}")
            raise BadRequestError(f"Failed to approve application: {str(e)}")

        logger.info(f"Agent application approved by {admin.email}: {applicant.email}")
        await self.audit.record(admin, "agent_approved", "agent_vetting", application.id, {
            "previous_status": previous_status,
            "new_status": application.status,
            "agent_email": applicant.email,
        })
        await self.notifier.send_template(
            applicant.email,
            "agent_approval",
            first_name=applicant.first_name,
            country_id=applicant.country_id,
        )
        return application

    async def deny(self, application_id: uuid.UUID, admin: User, reason: str) -> AgentVetting:
        """Deny an application with a reason the applicant will see."""
        if not reason or not reason.strip():
            raise ValidationError("A reason is required when denying an application")

        application, applicant = await self._get_reviewable(application_id, admin)
        previous_status = application.status

        try:
            application.status = VettingStatus.DENIED
            application.rejection_reason = reason.strip()
            application.reviewed_at = utc_now()
            application.reviewed_by = admin.id
            await self._save(application)
        except Exception as e:
            logger.error(f"Failed to deny agent application {application_id}: {e}")
            raise BadRequestError(f"Failed to deny application: {str(e)}")

        logger.info(f"Agent application denied by {admin.email}: {applicant.email}")
        await self.audit.record(admin, "agent_denied", "agent_vetting", application.id, {
            "previous_status": previous_status,
            "new_status": application.status,
            "rejection_reason": application.rejection_reason,
        })
        await self.notifier.send_template(
            applicant.email,
            "agent_rejection",
            first_name=applicant.first_name,
            reason=application.rejection_reason,
        )
        return application

    async def request_more_info(self, application_id: uuid.UUID, admin: User, notes: str) -> AgentVetting:
        """Send an application back to the applicant for corrections."""
        if not notes or not notes.strip():
            raise ValidationError("Notes are required when requesting more information")

        application, applicant = await self._get_reviewable(application_id, admin)
        previous_status = application.status

        try:
            application.status = VettingStatus.NEEDS_MORE_INFO
            application.admin_notes = notes.strip()
            application.reviewed_at = utc_now()
            application.reviewed_by = admin.id
            await self._save(application)
        except Exception as e:
            logger.error(f"Failed to update agent application {application_id}: {e}")
            raise BadRequestError(f"Failed to request more information: {str(e)}")

        logger.info(f"More information requested by {admin.email} from {applicant.email}")
        await self.audit.record(admin, "agent_info_requested", "agent_vetting", application.id, {
            "previous_status": previous_status,
            "new_status": application.status,
            "admin_notes": application.admin_notes,
        })
        return application

    async def get_my_application(self, user: User) -> AgentVetting:
        if user.user_type != UserType.AGENT:
            raise InsufficientPermissionsError("view agent applications")

        application = await self.vetting_repo.get_by_user_id(user.id)
        if not application:
            raise NotFoundError("Agent application")
        return application

    async def resubmit(self, user: User, update: VettingUpdateRequest) -> AgentVetting:
        """
        Apply the applicant's corrections and return the application to review.

        Raises:
            BadRequestError: If the application is not denied or awaiting information
        """
        application = await self.get_my_application(user)
        if not application.can_resubmit:
            raise BadRequestError(
                f"Application is {application.status.value}; only denied applications "
                "or applications awaiting information can be resubmitted"
            )

        previous_reason = application.rejection_reason or application.admin_notes
        try:
            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(application, field, value)
            if update.phone:
                user.phone = update.phone
            application.status = VettingStatus.PENDING_REVIEW
            application.rejection_reason = None
            application.submitted_at = utc_now()
            await self._save(application, user)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to resubmit agent application for {user.email}: {e}")
            raise BadRequestError(f"Failed to resubmit application: {str(e)}")

        logger.info(f"Agent application resubmitted: {user.email}")
        await self.notifier.notify_admins(
            "agent_resubmission_notification",
            await self.user_repo.get_admin_emails(application.country_id),
            agent_name=application.applicant_name,
            agent_email=application.email,
            country_id=application.country_id,
            previous_rejection_reason=previous_reason,
            application_id=str(application.id),
        )
        return application
