"""
Pydantic schemas for card payment intents, bank transfers and payment history.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from app.models.payment import PaymentMethod, PaymentType, PaymentStatus, ReferenceStatus


class PaymentIntentRequest(BaseModel):
    """
    Card payment request. Fields are checked by the payment service so that
    missing values are reported as a bad request.
    """

    amount: Optional[float] = Field(None, description="Amount in GYD", examples=[15000])
    email: Optional[str] = Field(None, examples=["agent@example.com"])
    plan: Optional[str] = Field(None, examples=["Agent Monthly"])
    currency: str = Field("usd", description="Charge currency at the gateway")


class PaymentIntentResponse(BaseModel):
    client_secret: str
    payment_intent_id: Optional[str] = None
    amount_usd_cents: int


class BankTransferRequest(BaseModel):
    amount_gyd: Optional[int] = Field(None, description="Amount in GYD", examples=[15000])
    plan_type: Optional[str] = Field(None, description="Plan name being paid for", examples=["Agent Monthly"])
    plan_id: Optional[str] = None


class BankTransferResponse(BaseModel):
    """Reference code and instructions for a manual bank transfer."""

    success: bool = True
    reference_code: str = Field(..., examples=["PHH-240115-A1B2C3"])
    amount_gyd: int
    amount_usd: int = Field(..., description="USD cents")
    amount_display: str = Field(..., examples=["G$15,000"])
    plan_type: str
    expires_at: datetime
    expires_in_hours: int
    bank_details: Dict[str, str]
    payment_instructions: List[str]
    user_info: Dict[str, Any]


class PaymentReferenceResponse(BaseModel):
    id: str
    user_id: str
    reference_code: str
    amount_gyd: int
    amount_usd: int
    amount_display: str
    plan_type: str
    plan_id: Optional[str] = None
    status: ReferenceStatus
    expires_at: datetime
    is_expired: bool
    created_at: datetime


class PaymentHistoryResponse(BaseModel):
    id: str
    user_id: str
    amount: int
    currency: str
    payment_method: PaymentMethod
    payment_type: PaymentType
    plan_type: Optional[str] = None
    status: PaymentStatus
    reference_code: Optional[str] = None
    external_id: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime


class PaymentHistoryListResponse(BaseModel):
    payments: List[PaymentHistoryResponse]
    total: int


class AdminPaymentResponse(PaymentHistoryResponse):
    """Payment row with payer details for the admin screen."""

    payer_email: str
    payer_name: str
    payer_country_id: str


class AdminPaymentListResponse(BaseModel):
    payments: List[AdminPaymentResponse]
    total: int
    page: int
    page_size: int
    country_filter: Optional[str] = None


class PaymentDecisionRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class PaymentDecisionResponse(BaseModel):
    success: bool
    message: str
    reference: PaymentReferenceResponse
