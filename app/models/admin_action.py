"""
Audit log of admin moderation actions.
"""

from sqlalchemy import String, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.datetime_utils import isoformat
import uuid
from typing import Any, Dict, Optional


class AdminAction(Base):
    """One admin decision, e.g. a property approval or a payment verification."""

    __tablename__ = "admin_actions"

    admin_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    target_type: Mapped[str] = mapped_column(String(64), nullable=False)
    target_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "admin_id": str(self.admin_id),
            "action_type": self.action_type,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "details": dict(self.details or {}),
            "created_at": isoformat(self.created_at),
        }
