"""
Admin audit log service.
Writes are best-effort: a failed audit entry is logged and never fails the admin action.
"""

from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.admin_action import AdminAction
from app.models.user import User
from app.repositories.admin_action import AdminActionRepository
import enum
import logging
import uuid

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    """Convert enums, UUIDs and nested containers into JSON-serializable values."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(v) for v in value]
    return str(value)


class AuditService:
    """Records admin moderation and reconciliation decisions."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.repo = AdminActionRepository(db_session)

    async def record(
        self,
        admin: User,
        action_type: str,
        target_type: str,
        target_id: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> Optional[AdminAction]:
        """
        Write an audit entry.

        Args:
            admin: Admin performing the action
            action_type: e.g. "property_approved", "payment_verified"
            target_type: e.g. "property", "payment_reference"
            target_id: Identifier of the affected row
            details: Extra context (previous/new status, reasons)

        Returns:
            The stored entry, or None if the write failed
        """
        admin_id, admin_email = admin.id, admin.email
        try:
            entry = await self.repo.create({
                "admin_id": admin_id,
                "action_type": action_type,
                "target_type": target_type,
                "target_id": str(target_id) if target_id is not None else None,
                "details": _json_safe(details or {}),
            })
            logger.info(f"Admin action recorded: {admin_email} {action_type} {target_type}:{target_id}")
            return entry
        except Exception as e:
            logger.warning(f"Failed to record admin action {action_type} by {admin_email}: {e}")
            return None

    async def history(self, target_type: str, target_id: uuid.UUID):
        return await self.repo.get_for_target(target_type, str(target_id))
