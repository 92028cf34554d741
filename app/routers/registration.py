"""
Self-service registration endpoints for agents, landlords and FSBO owners.
"""

from fastapi import APIRouter, Depends, status
from app.models.user import UserType
from app.services.registration import RegistrationService
from app.schemas.user import (
    AgentRegistrationRequest,
    OwnerRegistrationRequest,
    RegistrationResponse,
    UserResponse
)
from app.schemas.error import get_error_responses
from app.utils.dependencies import get_registration_service


router = APIRouter(prefix="/register", tags=["Registration"])


@router.post(
    "/agent",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register as an agent",
    description="Create an agent account and submit the vetting application for review",
    responses=get_error_responses(400, 409, 422)
)
async def register_agent(
    request: AgentRegistrationRequest,
    registration_service: RegistrationService = Depends(get_registration_service)
) -> RegistrationResponse:
    user, vetting = await registration_service.register_agent(request)
    return RegistrationResponse(
        success=True,
        message="Application submitted. We will review it and email you within 24-48 hours.",
        user=UserResponse.model_validate(user.to_dict()),
        vetting_status=vetting.status.value
    )


async def _register_owner(
    request: OwnerRegistrationRequest,
    user_type: UserType,
    registration_service: RegistrationService
) -> RegistrationResponse:
    user = await registration_service.register_owner(request, user_type)
    return RegistrationResponse(
        success=True,
        message="Account created. You can list properties once an admin approves your account.",
        user=UserResponse.model_validate(user.to_dict())
    )


@router.post(
    "/landlord",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register as a landlord",
    responses=get_error_responses(400, 409, 422)
)
async def register_landlord(
    request: OwnerRegistrationRequest,
    registration_service: RegistrationService = Depends(get_registration_service)
) -> RegistrationResponse:
    return await _register_owner(request, UserType.LANDLORD, registration_service)


@router.post(
    "/fsbo",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register as a for-sale-by-owner seller",
    responses=get_error_responses(400, 409, 422)
)
async def register_fsbo(
    request: OwnerRegistrationRequest,
    registration_service: RegistrationService = Depends(get_registration_service)
) -> RegistrationResponse:
    return await _register_owner(request, UserType.OWNER, registration_service)
