"""
Pricing service: public plan listing and admin plan management.
"""

from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.pricing import PricingPlan
from app.models.user import User, UserType
from app.repositories.pricing import PricingRepository
from app.schemas.pricing import PricingPlanUpdate, PricingPlanCreate
from app.services.audit import AuditService
from app.utils.country import normalize_country_code
from app.utils.currency import format_plan_price
from app.utils.permissions import get_user_permissions, can_access_country_data, get_country_filter
from app.utils.exceptions import (
    BadRequestError,
    ForbiddenError,
    InsufficientPermissionsError,
    NotFoundError,
    ValidationError
)
import uuid
import logging

logger = logging.getLogger(__name__)


def plan_to_response(plan: PricingPlan) -> Dict[str, Any]:
    """Plan fields plus display price in the plan country's currency."""
    return {**plan.to_dict(), **format_plan_price(plan.price, plan.country_id)}


class PricingService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.pricing_repo = PricingRepository(db_session)
        self.audit = AuditService(db_session)

    async def get_public_plans(self, country_id: str, user_type: Optional[UserType] = None) -> List[Dict[str, Any]]:
        """
        Active plans shown on pricing pages.
        Internal plans (admin, "+30" and featured upgrades) are left out.
        """
        plans = await self.pricing_repo.get_active_plans(country_id, user_type)
        visible = [plan for plan in plans if not plan.is_internal]
        logger.debug(f"Pricing for {country_id}: {len(visible)} of {len(plans)} plans visible")
        return [plan_to_response(plan) for plan in visible]

    async def list_admin_plans(self, admin: User) -> List[Dict[str, Any]]:
        permissions = get_user_permissions(admin)
        if not (permissions.can_edit_country_pricing or permissions.can_edit_global_pricing):
            raise InsufficientPermissionsError("manage pricing")
        plans = await self.pricing_repo.get_all_plans(get_country_filter(permissions))
        return [plan_to_response(plan) for plan in plans]

    async def update_plan(self, plan_id: uuid.UUID, update: PricingPlanUpdate, admin: User) -> Dict[str, Any]:
        """
        Edit a plan.

        Super admins may edit any plan; owner-level admins only their own country's plans.

        Returns:
            Dict with success, message and the updated plan

        Raises:
            InsufficientPermissionsError: If the admin level cannot edit pricing
            NotFoundError: If the plan doesn't exist
            ForbiddenError: If the plan belongs to another country
        """
        permissions = get_user_permissions(admin)
        if not (permissions.can_edit_global_pricing or permissions.can_edit_country_pricing):
            raise InsufficientPermissionsError("edit pricing")

        plan = await self.pricing_repo.get_by_id(plan_id)
        if not plan:
            raise NotFoundError("Pricing plan", str(plan_id))

        if not permissions.can_edit_global_pricing and not can_access_country_data(permissions, plan.country_id):
            logger.warning(f"Pricing edit denied for {admin.email}: plan {plan_id} is in {plan.country_id}")
            raise ForbiddenError("You may not have permission to edit this plan.")

        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise ValidationError("No valid fields provided for update")
        previous = {field: getattr(plan, field) for field in changes}

        try:
            updated = await self.pricing_repo.update(plan.id, changes)
        except Exception as e:
            logger.error(f"Failed to update pricing plan {plan_id}: {e}")
            raise BadRequestError(f"Failed to update pricing plan: {str(e)}")

        logger.info(f"Pricing plan {updated.plan_name} ({updated.country_id}) updated by {admin.email}")
        await self.audit.record(admin, "pricing_updated", "pricing_plan", updated.id, {
            "previous": previous,
            "changes": changes,
            "country_id": updated.country_id,
        })
        return {
            "success": True,
            "message": f"Pricing plan '{updated.plan_name}' updated successfully",
            "plan": plan_to_response(updated),
        }

    async def create_plan(self, data: PricingPlanCreate, admin: User) -> Dict[str, Any]:
        """Create a plan in any country. Super admins only."""
        permissions = get_user_permissions(admin)
        if not permissions.can_edit_global_pricing:
            raise InsufficientPermissionsError("create pricing plans")

        create_data = data.model_dump()
        create_data["country_id"] = normalize_country_code(create_data["country_id"])
        try:
            plan = await self.pricing_repo.create(create_data)
        except Exception as e:
            logger.error(f"Failed to create pricing plan: {e}")
            raise BadRequestError(f"Failed to create pricing plan: {str(e)}")

        logger.info(f"Pricing plan created by {admin.email}: {plan.plan_name} ({plan.country_id})")
        await self.audit.record(admin, "pricing_created", "pricing_plan", plan.id, {
            "plan_name": plan.plan_name,
            "country_id": plan.country_id,
            "price": plan.price,
        })
        return plan_to_response(plan)
