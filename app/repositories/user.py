"""
User repository for authentication and account management operations.
Provides secure user operations with password handling and country-scoped listings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from app.repositories.base import BaseRepository
from app.models.user import User, UserType, AdminLevel, ApprovalStatus
from typing import Optional, List, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Handles password hashing, email lookups and admin account listings.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information.
                Must include: email, password, first_name, last_name, user_type

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is invalid or already registered
        """
        data = dict(user_data)
        email = User.validate_email_format(data["email"])

        if await self.get_by_email(email):
            raise ValueError(f"User with email {email} already exists")

        password = data.pop("password")
        create_data = {
            **data,
            "email": email,
            "hashed_password": User.hash_password(password),
            "is_active": data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = email.lower().strip()
        try:
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.is_active:
            logger.debug(f"Authentication failed: user {email} is inactive")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return user

    async def check_email_availability(self, email: str) -> bool:
        """True when no account uses this email."""
        return await self.get_by_email(email) is None

    async def search_users(
        self,
        country_id: Optional[str] = None,
        user_type: Optional[UserType] = None,
        approval_status: Optional[ApprovalStatus] = None,
        query: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[User], int]:
        """
        List accounts for the admin dashboard.

        Args:
            country_id: Restrict to a country (None for all countries)
            user_type: Optional account type filter
            approval_status: Optional approval state filter
            query: Free-text match on name or email
            skip: Pagination offset
            limit: Page size

        Returns:
            Tuple of (users, total_count)
        """
        conditions = []
        if country_id:
            conditions.append(User.country_id == country_id)
        if user_type:
            conditions.append(User.user_type == user_type)
        if approval_status:
            conditions.append(User.approval_status == approval_status)
        if query:
            pattern = f"%{query.strip().lower()}%"
            conditions.append(or_(
                func.lower(User.email).like(pattern),
                func.lower(User.first_name).like(pattern),
                func.lower(User.last_name).like(pattern),
            ))

        try:
            count_result = await self.db.execute(select(func.count(User.id)).where(*conditions))
            total = count_result.scalar() or 0

            result = await self.db.execute(
                select(User)
                .where(*conditions)
                .order_by(User.created_at.desc())
                .offset(skip)
                .limit(limit)
            )
            return list(result.scalars().all()), total
        except Exception as e:
            logger.error(f"Failed to search users: {e}")
            raise

    async def get_admin_emails(self, country_id: Optional[str] = None) -> List[str]:
        """
        Emails of active admins responsible for a country.

        Super admins are always included; other admins only for their own country.
        """
        conditions = [User.user_type == UserType.ADMIN, User.is_active.is_(True), User.admin_level.is_not(None)]
        if country_id:
            conditions.append(or_(User.admin_level == AdminLevel.SUPER, User.country_id == country_id))

        result = await self.db.execute(select(User.email).where(*conditions))
        return [row[0] for row in result.all()]
