"""
Featured listing endpoints: upgrade prices, credit balance and placement.
"""

from fastapi import APIRouter, Depends, status

from app.models.user import User
from app.services.featuring import FeaturingService
from app.schemas.featuring import FeaturePurchaseRequest, FeaturePurchaseResponse, FeatureCreditsResponse
from app.schemas.pricing import PricingListResponse, PricingPlanResponse
from app.schemas.property import PropertyResponse
from app.schemas.error import get_error_responses
from app.utils.country import get_country_info
from app.utils.dependencies import get_current_active_user, get_featuring_service, get_request_country


router = APIRouter(prefix="/featuring", tags=["Featured Listings"])


@router.get(
    "/prices",
    response_model=PricingListResponse,
    summary="Featured upgrade prices",
    description="Active featured-upgrade plans for the request's country."
)
async def get_featuring_prices(
    country_id: str = Depends(get_request_country),
    featuring_service: FeaturingService = Depends(get_featuring_service)
) -> PricingListResponse:
    plans = await featuring_service.get_prices(country_id)
    return PricingListResponse(
        country_id=country_id,
        country_info=get_country_info(country_id),
        plans=[PricingPlanResponse.model_validate(plan) for plan in plans]
    )


@router.get(
    "/credits",
    response_model=FeatureCreditsResponse,
    summary="My featured credits",
    responses=get_error_responses(401)
)
async def get_featuring_credits(
    current_user: User = Depends(get_current_active_user),
    featuring_service: FeaturingService = Depends(get_featuring_service)
) -> FeatureCreditsResponse:
    result = await featuring_service.get_credits(current_user)
    return FeatureCreditsResponse(
        featured_credits=result["featured_credits"],
        featured_properties=[PropertyResponse.model_validate(prop.to_dict()) for prop in result["featured_properties"]]
    )


@router.post(
    "/purchase",
    response_model=FeaturePurchaseResponse,
    status_code=status.HTTP_200_OK,
    summary="Feature a listing",
    description=(
        "Starts a featured placement for a live listing. Owners spend one featured credit; "
        "admins feature listings in their country without credits."
    ),
    responses=get_error_responses(400, 401, 402, 403, 404, 409, 422)
)
async def purchase_featuring(
    request: FeaturePurchaseRequest,
    current_user: User = Depends(get_current_active_user),
    featuring_service: FeaturingService = Depends(get_featuring_service)
) -> FeaturePurchaseResponse:
    result = await featuring_service.feature_property(request.property_id, current_user, request.duration_days)
    return FeaturePurchaseResponse(
        success=result["success"],
        message=result["message"],
        property=PropertyResponse.model_validate(result["property"].to_dict()),
        featured_until=result["featured_until"],
        credits_remaining=result["credits_remaining"]
    )
