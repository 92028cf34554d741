"""
Public pricing endpoint.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.models.user import UserType
from app.services.pricing import PricingService
from app.schemas.pricing import PricingListResponse, PricingPlanResponse
from app.utils.country import get_country_info
from app.utils.dependencies import get_pricing_service, get_request_country


router = APIRouter(prefix="/pricing", tags=["Pricing"])


@router.get(
    "",
    response_model=PricingListResponse,
    summary="Pricing plans for a country",
    description=(
        "Active plans ordered for display. The country comes from the `country` query "
        "parameter, then the country cookie, then the default country."
    )
)
async def get_pricing(
    user_type: Optional[UserType] = Query(None, description="Only plans for this account type"),
    country_id: str = Depends(get_request_country),
    pricing_service: PricingService = Depends(get_pricing_service)
) -> PricingListResponse:
    plans = await pricing_service.get_public_plans(country_id, user_type)
    return PricingListResponse(
        country_id=country_id,
        country_info=get_country_info(country_id),
        plans=[PricingPlanResponse.model_validate(plan) for plan in plans]
    )
