"""
Agent vetting application model.
An agent account stays unverified until its application is approved.
"""

from sqlalchemy import String, Text, Integer, JSON, DateTime, Uuid, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.datetime_utils import isoformat
from datetime import datetime
import enum
import uuid
from typing import List, Optional


class VettingStatus(str, enum.Enum):
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    DENIED = "denied"
    NEEDS_MORE_INFO = "needs_more_info"


# Statuses an admin can still decide on
REVIEWABLE_STATUSES = (VettingStatus.PENDING_REVIEW, VettingStatus.NEEDS_MORE_INFO)

# Statuses from which the applicant may edit and resubmit
RESUBMITTABLE_STATUSES = (VettingStatus.DENIED, VettingStatus.NEEDS_MORE_INFO)


class AgentVetting(Base):
    """Agent application with company, license and reference details."""

    __tablename__ = "agent_vetting"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )

    # Applicant snapshot
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    company_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    license_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    years_experience: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    specialties: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    reference1_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    reference1_contact: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    reference2_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    reference2_contact: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    country_id: Mapped[str] = mapped_column(String(2), nullable=False, default="GY", index=True)

    status: Mapped[VettingStatus] = mapped_column(
        SQLEnum(VettingStatus, name="vetting_status"),
        nullable=False,
        default=VettingStatus.PENDING_REVIEW,
        index=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)

    @property
    def applicant_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_reviewable(self) -> bool:
        return self.status in REVIEWABLE_STATUSES

    @property
    def can_resubmit(self) -> bool:
        return self.status in RESUBMITTABLE_STATUSES

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "company_name": self.company_name,
            "license_number": self.license_number,
            "years_experience": self.years_experience,
            "specialties": list(self.specialties or []),
            "reference1_name": self.reference1_name,
            "reference1_contact": self.reference1_contact,
            "reference2_name": self.reference2_name,
            "reference2_contact": self.reference2_contact,
            "country_id": self.country_id,
            "status": self.status.value,
            "rejection_reason": self.rejection_reason,
            "admin_notes": self.admin_notes,
            "submitted_at": isoformat(self.submitted_at),
            "reviewed_at": isoformat(self.reviewed_at),
            "reviewed_by": str(self.reviewed_by) if self.reviewed_by else None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
