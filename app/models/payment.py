"""
Payment history and bank-transfer reference models.
Bank transfers are reconciled manually by an admin against the reference code.
"""

from sqlalchemy import String, Text, Integer, DateTime, Uuid, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.datetime_utils import isoformat, ensure_aware, utc_now
from datetime import datetime
import enum
import uuid
from typing import Optional


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"


class PaymentType(str, enum.Enum):
    SUBSCRIPTION = "subscription"
    PROPERTY_LISTING = "property_listing"
    FEATURED_UPGRADE = "featured_upgrade"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"
    REFUNDED = "refunded"


class ReferenceStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PaymentHistory(Base):
    """A payment attempt by a user, card or bank transfer."""

    __tablename__ = "payment_history"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False, comment="Amount in major units of currency")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GYD")
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod, name="payment_method"),
        nullable=False
    )
    payment_type: Mapped[PaymentType] = mapped_column(
        SQLEnum(PaymentType, name="payment_type"),
        nullable=False
    )
    plan_type: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, name="payment_status"),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True
    )
    reference_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    external_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Gateway intent id")
    verified_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "amount": self.amount,
            "currency": self.currency,
            "payment_method": self.payment_method.value,
            "payment_type": self.payment_type.value,
            "plan_type": self.plan_type,
            "status": self.status.value,
            "reference_code": self.reference_code,
            "external_id": self.external_id,
            "verified_by": str(self.verified_by) if self.verified_by else None,
            "verified_at": isoformat(self.verified_at),
            "notes": self.notes,
            "created_at": isoformat(self.created_at),
        }


class PaymentReference(Base):
    """Bank-transfer reference code issued to a payer, valid for a limited time."""

    __tablename__ = "payment_references"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    reference_code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    amount_gyd: Mapped[int] = mapped_column(Integer, nullable=False)
    amount_usd: Mapped[int] = mapped_column(Integer, nullable=False, comment="USD cents")
    plan_type: Mapped[str] = mapped_column(String(150), nullable=False)
    plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    status: Mapped[ReferenceStatus] = mapped_column(
        SQLEnum(ReferenceStatus, name="reference_status"),
        nullable=False,
        default=ReferenceStatus.PENDING,
        index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return ensure_aware(self.expires_at) < (now or utc_now())

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "reference_code": self.reference_code,
            "amount_gyd": self.amount_gyd,
            "amount_usd": self.amount_usd,
            "plan_type": self.plan_type,
            "plan_id": str(self.plan_id) if self.plan_id else None,
            "status": self.status.value,
            "expires_at": isoformat(self.expires_at),
            "created_at": isoformat(self.created_at),
        }
