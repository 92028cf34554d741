"""
Admin endpoints: moderation queue, account approval, agent vetting, pricing and payment reconciliation.
Every list is scoped to the admin's country unless the admin can see all countries.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, List
from uuid import UUID
import math

from app.models.user import User, UserType, ApprovalStatus
from app.models.vetting import VettingStatus
from app.models.payment import PaymentStatus
from app.services.property import PropertyService
from app.services.user import UserService
from app.services.vetting import VettingService
from app.services.pricing import PricingService
from app.services.payment import PaymentService
from app.schemas.property import PropertyResponse, ModerationQueueResponse
from app.schemas.user import UserResponse, UserListResponse, AccountDecisionRequest
from app.schemas.vetting import (
    VettingResponse,
    VettingListResponse,
    VettingApproveRequest,
    VettingDenyRequest,
    VettingInfoRequest,
    VettingDecisionResponse
)
from app.schemas.pricing import (
    PricingPlanResponse,
    PricingPlanUpdate,
    PricingPlanCreate,
    PricingUpdateResponse
)
from app.schemas.payment import (
    AdminPaymentResponse,
    AdminPaymentListResponse,
    PaymentDecisionRequest,
    PaymentDecisionResponse,
    PaymentReferenceResponse
)
from app.schemas.error import get_common_error_responses, get_error_responses
from app.utils.dependencies import (
    get_current_admin_user,
    get_property_service,
    get_user_service,
    get_vetting_service,
    get_pricing_service,
    get_payment_service
)


router = APIRouter(prefix="/admin", tags=["Admin"])


# Moderation

@router.get(
    "/properties/pending",
    response_model=ModerationQueueResponse,
    summary="Moderation queue",
    description="Pending listings awaiting review, oldest first",
    responses=get_error_responses(401, 403)
)
async def get_pending_properties(
    admin: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> ModerationQueueResponse:
    properties, country_filter = await property_service.get_moderation_queue(admin)
    return ModerationQueueResponse(
        properties=[PropertyResponse.model_validate(prop.to_dict()) for prop in properties],
        total=len(properties),
        country_filter=country_filter
    )


# Accounts

@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List accounts",
    responses=get_error_responses(401, 403)
)
async def list_users(
    user_type: Optional[UserType] = Query(None, description="Filter by account type"),
    approval_status: Optional[ApprovalStatus] = Query(None, description="Filter by approval status"),
    query: Optional[str] = Query(None, description="Search name or email"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> UserListResponse:
    users, total = await user_service.list_users(
        admin,
        user_type=user_type,
        approval_status=approval_status,
        query=query,
        page=page,
        page_size=page_size
    )
    return UserListResponse(
        users=[UserResponse.model_validate(user.to_dict()) for user in users],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total > 0 else 1
    )


@router.post(
    "/users/{user_id}/approve",
    response_model=UserResponse,
    summary="Approve a landlord or FSBO account",
    responses=get_common_error_responses()
)
async def approve_user(
    decision: Optional[AccountDecisionRequest] = None,
    user_id: UUID = Path(..., description="User ID"),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    notes = decision.notes if decision else None
    user = await user_service.approve_account(user_id, admin, notes=notes)
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/users/{user_id}/reject",
    response_model=UserResponse,
    summary="Reject a landlord or FSBO account",
    description="A reason is required and is included in the email to the applicant.",
    responses=get_common_error_responses()
)
async def reject_user(
    decision: AccountDecisionRequest,
    user_id: UUID = Path(..., description="User ID"),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    user = await user_service.reject_account(user_id, admin, decision.reason)
    return UserResponse.model_validate(user.to_dict())


# Agent vetting

@router.get(
    "/vetting",
    response_model=VettingListResponse,
    summary="List agent applications",
    responses=get_error_responses(401, 403)
)
async def list_vetting_applications(
    status_filter: Optional[VettingStatus] = Query(None, alias="status", description="Filter by status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: User = Depends(get_current_admin_user),
    vetting_service: VettingService = Depends(get_vetting_service)
) -> VettingListResponse:
    applications, total, country_filter = await vetting_service.list_applications(
        admin, status=status_filter, page=page, page_size=page_size
    )
    return VettingListResponse(
        applications=[VettingResponse.model_validate(app.to_dict()) for app in applications],
        total=total,
        page=page,
        page_size=page_size,
        country_filter=country_filter
    )


def _vetting_decision(application, message: str) -> VettingDecisionResponse:
    return VettingDecisionResponse(
        success=True,
        message=message,
        application=VettingResponse.model_validate(application.to_dict())
    )


@router.post(
    "/vetting/{application_id}/approve",
    response_model=VettingDecisionResponse,
    summary="Approve an agent application",
    responses=get_common_error_responses()
)
async def approve_agent(
    decision: Optional[VettingApproveRequest] = None,
    application_id: UUID = Path(..., description="Application ID"),
    admin: User = Depends(get_current_admin_user),
    vetting_service: VettingService = Depends(get_vetting_service)
) -> VettingDecisionResponse:
    application = await vetting_service.approve(
        application_id, admin, notes=decision.notes if decision else None
    )
    return _vetting_decision(application, "Agent application approved")


@router.post(
    "/vetting/{application_id}/deny",
    response_model=VettingDecisionResponse,
    summary="Deny an agent application",
    responses=get_common_error_responses()
)
async def deny_agent(
    decision: VettingDenyRequest,
    application_id: UUID = Path(..., description="Application ID"),
    admin: User = Depends(get_current_admin_user),
    vetting_service: VettingService = Depends(get_vetting_service)
) -> VettingDecisionResponse:
    application = await vetting_service.deny(application_id, admin, decision.reason)
    return _vetting_decision(application, "Agent application denied")


@router.post(
    "/vetting/{application_id}/request-info",
    response_model=VettingDecisionResponse,
    summary="Ask an applicant for more information",
    responses=get_common_error_responses()
)
async def request_agent_info(
    request: VettingInfoRequest,
    application_id: UUID = Path(..., description="Application ID"),
    admin: User = Depends(get_current_admin_user),
    vetting_service: VettingService = Depends(get_vetting_service)
) -> VettingDecisionResponse:
    application = await vetting_service.request_more_info(application_id, admin, request.notes)
    return _vetting_decision(application, "More information requested from the applicant")


# Pricing

@router.get(
    "/pricing",
    response_model=List[PricingPlanResponse],
    summary="List pricing plans for management",
    description="All plans, including inactive and internal ones, in the admin's scope",
    responses=get_error_responses(401, 403)
)
async def list_pricing_plans(
    admin: User = Depends(get_current_admin_user),
    pricing_service: PricingService = Depends(get_pricing_service)
) -> List[PricingPlanResponse]:
    plans = await pricing_service.list_admin_plans(admin)
    return [PricingPlanResponse.model_validate(plan) for plan in plans]


@router.post(
    "/pricing",
    response_model=PricingPlanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a pricing plan",
    description="Super admins only",
    responses=get_error_responses(400, 401, 403, 422)
)
async def create_pricing_plan(
    plan_data: PricingPlanCreate,
    admin: User = Depends(get_current_admin_user),
    pricing_service: PricingService = Depends(get_pricing_service)
) -> PricingPlanResponse:
    plan = await pricing_service.create_plan(plan_data, admin)
    return PricingPlanResponse.model_validate(plan)


@router.put(
    "/pricing/{plan_id}",
    response_model=PricingUpdateResponse,
    summary="Update a pricing plan",
    description="Super admins edit any plan; owner-level admins only their own country's plans.",
    responses=get_common_error_responses()
)
async def update_pricing_plan(
    update: PricingPlanUpdate,
    plan_id: UUID = Path(..., description="Plan ID"),
    admin: User = Depends(get_current_admin_user),
    pricing_service: PricingService = Depends(get_pricing_service)
) -> PricingUpdateResponse:
    result = await pricing_service.update_plan(plan_id, update, admin)
    return PricingUpdateResponse.model_validate(result)


# Payments

@router.get(
    "/payments",
    response_model=AdminPaymentListResponse,
    summary="List payments",
    description="Scoped to the payer's country for country admins",
    responses=get_error_responses(401, 403)
)
async def list_payments(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status", description="Filter by status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: User = Depends(get_current_admin_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> AdminPaymentListResponse:
    payments, total, country_filter = await payment_service.list_admin_payments(
        admin, status=status_filter, page=page, page_size=page_size
    )
    return AdminPaymentListResponse(
        payments=[AdminPaymentResponse.model_validate(payment) for payment in payments],
        total=total,
        page=page,
        page_size=page_size,
        country_filter=country_filter
    )


@router.post(
    "/payments/{reference_code}/verify",
    response_model=PaymentDecisionResponse,
    summary="Verify a bank transfer",
    description="Confirms the transfer was received and activates the payer's subscription.",
    responses=get_error_responses(400, 401, 403, 404, 410)
)
async def verify_payment(
    decision: Optional[PaymentDecisionRequest] = None,
    reference_code: str = Path(..., description="Reference code, e.g. PHH-240115-A1B2C3"),
    admin: User = Depends(get_current_admin_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentDecisionResponse:
    reference = await payment_service.verify_reference(
        reference_code, admin, notes=decision.notes if decision else None
    )
    return PaymentDecisionResponse(
        success=True,
        message=f"Payment {reference['reference_code']} verified",
        reference=PaymentReferenceResponse.model_validate(reference)
    )


@router.post(
    "/payments/{reference_code}/reject",
    response_model=PaymentDecisionResponse,
    summary="Reject a bank transfer",
    responses=get_error_responses(400, 401, 403, 404, 410)
)
async def reject_payment(
    decision: Optional[PaymentDecisionRequest] = None,
    reference_code: str = Path(..., description="Reference code"),
    admin: User = Depends(get_current_admin_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentDecisionResponse:
    reference = await payment_service.reject_reference(
        reference_code, admin, notes=decision.notes if decision else None
    )
    return PaymentDecisionResponse(
        success=True,
        message=f"Payment {reference['reference_code']} rejected",
        reference=PaymentReferenceResponse.model_validate(reference)
    )
