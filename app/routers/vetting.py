"""
Applicant-facing agent vetting endpoints.
"""

from fastapi import APIRouter, Depends

from app.models.user import User
from app.services.vetting import VettingService
from app.schemas.vetting import VettingResponse, VettingUpdateRequest
from app.schemas.error import get_error_responses
from app.utils.dependencies import get_current_active_user, get_vetting_service


router = APIRouter(prefix="/vetting", tags=["Agent Vetting"])


@router.get(
    "/me",
    response_model=VettingResponse,
    summary="My agent application",
    responses=get_error_responses(401, 403, 404)
)
async def get_my_application(
    current_user: User = Depends(get_current_active_user),
    vetting_service: VettingService = Depends(get_vetting_service)
) -> VettingResponse:
    application = await vetting_service.get_my_application(current_user)
    return VettingResponse.model_validate(application.to_dict())


@router.put(
    "/me",
    response_model=VettingResponse,
    summary="Correct and resubmit my application",
    description="Allowed after a denial or a request for more information; returns the application to review.",
    responses=get_error_responses(400, 401, 403, 404, 422)
)
async def resubmit_application(
    update: VettingUpdateRequest,
    current_user: User = Depends(get_current_active_user),
    vetting_service: VettingService = Depends(get_vetting_service)
) -> VettingResponse:
    application = await vetting_service.resubmit(current_user, update)
    return VettingResponse.model_validate(application.to_dict())
