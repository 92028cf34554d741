"""
Payment endpoints: card payment intents, bank-transfer references and payment history.
"""

from fastapi import APIRouter, Depends, status, Path
from typing import Optional

from app.models.user import User
from app.services.payment import PaymentService
from app.schemas.payment import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    BankTransferRequest,
    BankTransferResponse,
    PaymentReferenceResponse,
    PaymentHistoryResponse,
    PaymentHistoryListResponse
)
from app.schemas.error import get_error_responses
from app.utils.dependencies import (
    get_current_active_user,
    get_optional_current_user,
    get_payment_service
)


router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "/payment-intent",
    response_model=PaymentIntentResponse,
    status_code=status.HTTP_200_OK,
    summary="Create a card payment intent",
    description="Converts the GYD amount to USD cents and creates a payment intent with the card gateway.",
    responses=get_error_responses(400, 502)
)
async def create_payment_intent(
    request: PaymentIntentRequest,
    current_user: Optional[User] = Depends(get_optional_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentIntentResponse:
    """
    Raises:
        BadRequestError: If amount, email or plan is missing
        ExternalServiceError: If the card gateway fails
    """
    result = await payment_service.create_payment_intent(request, current_user)
    return PaymentIntentResponse.model_validate(result)


@router.post(
    "/bank-transfer",
    response_model=BankTransferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a bank-transfer reference",
    description="Issues a reference code valid for 24 hours along with the bank details to pay into.",
    responses=get_error_responses(400, 401, 422)
)
async def create_bank_transfer(
    request: BankTransferRequest,
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> BankTransferResponse:
    result = await payment_service.create_bank_transfer(request, current_user)
    return BankTransferResponse.model_validate(result)


@router.get(
    "/bank-transfer/{reference_code}",
    response_model=PaymentReferenceResponse,
    summary="Bank-transfer reference status",
    responses=get_error_responses(401, 404)
)
async def get_bank_transfer(
    reference_code: str = Path(..., description="Reference code"),
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentReferenceResponse:
    reference = await payment_service.get_reference(reference_code, current_user)
    return PaymentReferenceResponse.model_validate(reference)


@router.get(
    "/history",
    response_model=PaymentHistoryListResponse,
    summary="My payment history",
    description="Newest first",
    responses=get_error_responses(401)
)
async def get_payment_history(
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentHistoryListResponse:
    payments = await payment_service.get_history(current_user)
    return PaymentHistoryListResponse(
        payments=[PaymentHistoryResponse.model_validate(payment.to_dict()) for payment in payments],
        total=len(payments)
    )
