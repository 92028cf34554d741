"""
User profile model with authentication, user types and admin levels.
Covers agents, landlords, FSBO owners and country-scoped administrators.
"""

from sqlalchemy import String, Boolean, Integer, Text, DateTime, Uuid, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.datetime_utils import isoformat
from app.utils.auth import hash_password as _hash_password, verify_password as _verify_password
from email_validator import validate_email, EmailNotValidError
from datetime import datetime
import enum
import uuid
from typing import Optional


class UserType(str, enum.Enum):
    """Kind of account. OWNER is a For-Sale-By-Owner seller."""
    AGENT = "agent"
    LANDLORD = "landlord"
    OWNER = "owner"
    ADMIN = "admin"


class AdminLevel(str, enum.Enum):
    """Admin tier gating cross-country visibility and edit rights."""
    SUPER = "super"
    OWNER = "owner"
    BASIC = "basic"


class ApprovalStatus(str, enum.Enum):
    """Account approval state for landlord and FSBO accounts."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubscriptionStatus(str, enum.Enum):
    NONE = "none"
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"


class User(Base):
    """
    User profile for authentication and authorization.
    Admin capabilities are derived from admin_level and country_id.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    user_type: Mapped[UserType] = mapped_column(
        SQLEnum(UserType, name="user_type"),
        nullable=False,
        index=True,
        comment="Account type used for role-based access control"
    )

    admin_level: Mapped[Optional[AdminLevel]] = mapped_column(
        SQLEnum(AdminLevel, name="admin_level"),
        nullable=True,
        comment="Admin tier, only set for admin accounts"
    )

    country_id: Mapped[str] = mapped_column(
        String(2),
        nullable=False,
        default="GY",
        index=True,
        comment="ISO country code the account belongs to"
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Account approval (landlord / FSBO)
    approval_status: Mapped[Optional[ApprovalStatus]] = mapped_column(
        SQLEnum(ApprovalStatus, name="approval_status"),
        nullable=True,
        index=True
    )
    approval_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    approval_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Subscription
    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        SQLEnum(SubscriptionStatus, name="subscription_status"),
        nullable=False,
        default=SubscriptionStatus.NONE
    )
    subscription_plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    featured_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        Index("idx_users_type_country", "user_type", "country_id"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, user_type={self.user_type})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Raises:
            ValueError: If the password is shorter than 8 characters
        """
        return _hash_password(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return _verify_password(password, self.hashed_password)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        """Admins need both the admin user type and a level."""
        return self.user_type == UserType.ADMIN and self.admin_level is not None

    @property
    def is_super_admin(self) -> bool:
        return self.is_admin and self.admin_level == AdminLevel.SUPER

    @property
    def requires_account_approval(self) -> bool:
        """Landlord and FSBO accounts are approved by an admin before listing."""
        return self.user_type in (UserType.LANDLORD, UserType.OWNER)

    def owns(self, resource_owner_id: uuid.UUID) -> bool:
        """Check whether this user owns a resource."""
        return self.id == resource_owner_id

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding sensitive data).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "phone": self.phone,
            "user_type": self.user_type.value,
            "admin_level": self.admin_level.value if self.admin_level else None,
            "country_id": self.country_id,
            "is_active": self.is_active,
            "is_verified": self.is_verified,
            "approval_status": self.approval_status.value if self.approval_status else None,
            "approval_notes": self.approval_notes,
            "rejection_reason": self.rejection_reason,
            "approval_date": isoformat(self.approval_date),
            "subscription_status": self.subscription_status.value,
            "featured_credits": self.featured_credits or 0,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
