"""
Registration service for agent, landlord and FSBO onboarding.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User, UserType, ApprovalStatus
from app.models.vetting import AgentVetting, VettingStatus
from app.repositories.user import UserRepository
from app.repositories.vetting import VettingRepository
from app.schemas.user import AgentRegistrationRequest, OwnerRegistrationRequest
from app.services.notification import NotificationService
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import (
    APIException,
    BadRequestError,
    DuplicateResourceError,
    ValidationError
)
import logging

logger = logging.getLogger(__name__)

_VETTING_FIELDS = (
    "company_name",
    "license_number",
    "years_experience",
    "specialties",
    "reference1_name",
    "reference1_contact",
    "reference2_name",
    "reference2_contact",
)


class RegistrationService:
    """
    Self-service sign-up.
    Agents start unverified with a vetting application; landlords and FSBO
    owners start with a pending account approval.
    """

    def __init__(self, db_session: AsyncSession, notifier: Optional[NotificationService] = None):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.vetting_repo = VettingRepository(db_session)
        self.notifier = notifier or NotificationService()

    async def _create_account(self, data: dict) -> User:
        if not await self.user_repo.check_email_availability(data["email"]):
            logger.warning(f"Registration rejected, email already registered: {data['email']}")
            raise DuplicateResourceError("User", data["email"])
        try:
            return await self.user_repo.create_user(data)
        except ValueError as e:
            raise ValidationError(str(e))

    async def register_agent(self, request: AgentRegistrationRequest) -> Tuple[User, AgentVetting]:
        """
        Create an agent account and its vetting application.

        Raises:
            DuplicateResourceError: If the email is already registered
        """
        try:
            user = await self._create_account({
                "email": request.email,
                "password": request.password,
                "first_name": request.first_name,
                "last_name": request.last_name,
                "phone": request.phone,
                "user_type": UserType.AGENT,
                "country_id": request.country_id,
                "is_verified": False,
            })

            vetting_data = {field: getattr(request, field) for field in _VETTING_FIELDS}
            vetting_data.update({
                "user_id": user.id,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "email": user.email,
                "phone": user.phone,
                "country_id": user.country_id,
                "status": VettingStatus.PENDING_REVIEW,
                "submitted_at": utc_now(),
            })
            try:
                vetting = await self.vetting_repo.create(vetting_data)
            except Exception:
                await self.user_repo.delete(user.id)
                raise

            logger.info(f"Agent registered: {user.email} (vetting {vetting.id})")
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to register agent {request.email}: {e}")
            raise BadRequestError(f"Failed to register agent: {str(e)}")

        await self.notifier.send_template(
            user.email,
            "agent_application_received",
            first_name=user.first_name,
        )
        await self.notifier.notify_admins(
            "agent_admin_notification",
            await self.user_repo.get_admin_emails(user.country_id),
            agent_name=user.full_name,
            agent_email=user.email,
            country_id=user.country_id,
            company_name=vetting.company_name,
            license_number=vetting.license_number,
            application_id=str(vetting.id),
        )
        return user, vetting

    async def register_owner(self, request: OwnerRegistrationRequest, user_type: UserType) -> User:
        """
        Create a landlord or FSBO owner account pending admin approval.

        Raises:
            DuplicateResourceError: If the email is already registered
        """
        if user_type not in (UserType.LANDLORD, UserType.OWNER):
            raise BadRequestError(f"Cannot self-register as {user_type.value}")

        try:
            user = await self._create_account({
                "email": request.email,
                "password": request.password,
                "first_name": request.first_name,
                "last_name": request.last_name,
                "phone": request.phone,
                "user_type": user_type,
                "country_id": request.country_id,
                "approval_status": ApprovalStatus.PENDING,
            })
            logger.info(f"{user_type.value.capitalize()} registered: {user.email} (pending approval)")
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to register {user_type.value} {request.email}: {e}")
            raise BadRequestError(f"Failed to register account: {str(e)}")

        await self.notifier.send_template(user.email, "welcome", first_name=user.first_name)
        return user
