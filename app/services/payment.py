"""
Payment service: card payment intents, bank-transfer references and admin reconciliation.
"""

from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.models.payment import (
    PaymentHistory,
    PaymentReference,
    PaymentMethod,
    PaymentType,
    PaymentStatus,
    ReferenceStatus
)
from app.models.pricing import PlanType
from app.models.user import User, SubscriptionStatus
from app.repositories.payment import PaymentHistoryRepository, PaymentReferenceRepository
from app.repositories.pricing import PricingRepository
from app.repositories.user import UserRepository
from app.schemas.payment import PaymentIntentRequest, BankTransferRequest
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.services.payment_gateway import PaymentGatewayClient
from app.utils.currency import convert_gyd_to_usd_cents, format_gyd
from app.utils.datetime_utils import utc_now
from app.utils.permissions import get_user_permissions, can_access_country_data, get_country_filter
from app.utils.exceptions import (
    APIException,
    BadRequestError,
    CountryAccessError,
    InsufficientPermissionsError,
    NotFoundError,
    PaymentReferenceExpiredError
)
import secrets
import string
import uuid
import logging

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "PHH"
REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_SUFFIX_LENGTH = 6


def derive_payment_type(plan_type: Optional[str]) -> PaymentType:
    """Map a plan name to the kind of purchase it represents."""
    name = (plan_type or "").lower()
    if any(word in name for word in ("subscription", "monthly", "yearly")):
        return PaymentType.SUBSCRIPTION
    if "property" in name or "listing" in name:
        return PaymentType.PROPERTY_LISTING
    if "featured" in name:
        return PaymentType.FEATURED_UPGRADE
    return PaymentType.SUBSCRIPTION


def generate_reference_code(now: Optional[datetime] = None) -> str:
    """PHH-<YYMMDD>-<6 uppercase alphanumerics>."""
    stamp = (now or utc_now()).strftime("%y%m%d")
    suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_SUFFIX_LENGTH))
    return f"{REFERENCE_PREFIX}-{stamp}-{suffix}"


def reference_to_response(reference: PaymentReference, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        **reference.to_dict(),
        "amount_display": format_gyd(reference.amount_gyd),
        "is_expired": reference.status == ReferenceStatus.EXPIRED or (
            reference.status == ReferenceStatus.PENDING and reference.is_expired(now)
        ),
    }


class PaymentService:
    """
    Payment flows.
    Bank transfers are confirmed manually by an admin quoting the reference code.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        gateway: Optional[PaymentGatewayClient] = None,
        notifier: Optional[NotificationService] = None
    ):
        self.db = db_session
        self.history_repo = PaymentHistoryRepository(db_session)
        self.reference_repo = PaymentReferenceRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.pricing_repo = PricingRepository(db_session)
        self.audit = AuditService(db_session)
        self.gateway = gateway or PaymentGatewayClient()
        self.notifier = notifier or NotificationService()

    async def _save(self, *objects) -> None:
        try:
            await self.db.commit()
            for obj in objects:
                await self.db.refresh(obj)
        except Exception:
            await self.db.rollback()
            raise

    async def _record_history(self, data: Dict[str, Any]) -> Optional[PaymentHistory]:
        """History writes are secondary to the payment itself; failures are only logged."""
        try:
            return await self.history_repo.create(data)
        except Exception as e:
            logger.warning(f"Failed to record payment history for {data.get('reference_code') or data.get('external_id')}: {e}")
            return None

    async def create_payment_intent(
        self,
        request: PaymentIntentRequest,
        current_user: Optional[User] = None
    ) -> Dict[str, Any]:
        """
        Create a card payment intent for a GYD amount, charged in USD.

        Raises:
            BadRequestError: If amount, email or plan is missing
            ExternalServiceError: If the gateway fails
        """
        missing = [
            field for field, value in (("amount", request.amount), ("email", request.email), ("plan", request.plan))
            if value in (None, "")
        ]
        if missing:
            raise BadRequestError(f"Missing required fields: {', '.join(missing)}")
        if request.amount <= 0:
            raise BadRequestError("Amount must be greater than 0")

        amount_cents = convert_gyd_to_usd_cents(request.amount)
        if amount_cents < 1:
            raise BadRequestError("Amount is too small to charge")

        intent = await self.gateway.create_payment_intent(
            amount_cents=amount_cents,
            currency=request.currency or "usd",
            receipt_email=request.email,
            metadata={"plan": request.plan, "amount_gyd": str(request.amount)},
        )

        if current_user is not None:
            await self._record_history({
                "user_id": current_user.id,
                "amount": round(request.amount),
                "currency": "GYD",
                "payment_method": PaymentMethod.CARD,
                "payment_type": derive_payment_type(request.plan),
                "plan_type": request.plan,
                "status": PaymentStatus.PENDING,
                "external_id": intent.get("id"),
            })

        return {
            "client_secret": intent["client_secret"],
            "payment_intent_id": intent.get("id"),
            "amount_usd_cents": amount_cents,
        }

    async def _unique_reference_code(self, now: datetime) -> str:
        for _ in range(5):
            code = generate_reference_code(now)
            if not await self.reference_repo.code_exists(code):
                return code
        raise BadRequestError("Could not generate a unique reference code, please try again")

    async def create_bank_transfer(self, request: BankTransferRequest, current_user: User) -> Dict[str, Any]:
        """
        Issue a bank-transfer reference code with payment instructions.

        Raises:
            BadRequestError: On missing fields, an out-of-range amount or too many pending references
        """
        if request.amount_gyd is None or not request.plan_type:
            raise BadRequestError("amount_gyd and plan_type are required")

        if not settings.payment_min_amount <= request.amount_gyd <= settings.payment_max_amount:
            raise BadRequestError(
                f"Amount must be between {format_gyd(settings.payment_min_amount)} "
                f"and {format_gyd(settings.payment_max_amount)}"
            )

        plan_id = None
        if request.plan_id:
            try:
                plan_id = uuid.UUID(request.plan_id)
            except ValueError:
                raise BadRequestError("Invalid plan_id")

        now = utc_now()
        pending = await self.reference_repo.count_active_pending(current_user.id, now)
        if pending >= settings.max_pending_references_per_user:
            logger.warning(f"Bank transfer refused for {current_user.email}: {pending} pending references")
            raise BadRequestError(
                f"You already have {pending} pending payment references. "
                "Complete or wait for them to expire before requesting another."
            )

        try:
            reference_code = await self._unique_reference_code(now)
            expires_at = now + timedelta(hours=settings.reference_expiry_hours)
            reference = await self.reference_repo.create({
                "user_id": current_user.id,
                "reference_code": reference_code,
                "amount_gyd": request.amount_gyd,
                "amount_usd": convert_gyd_to_usd_cents(request.amount_gyd),
                "plan_type": request.plan_type,
                "plan_id": plan_id,
                "status": ReferenceStatus.PENDING,
                "expires_at": expires_at,
            })
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create bank transfer reference for {current_user.email}: {e}")
            raise BadRequestError(f"Failed to create payment reference: {str(e)}")

        await self._record_history({
            "user_id": current_user.id,
            "amount": request.amount_gyd,
            "currency": "GYD",
            "payment_method": PaymentMethod.BANK_TRANSFER,
            "payment_type": derive_payment_type(request.plan_type),
            "plan_type": request.plan_type,
            "status": PaymentStatus.PENDING,
            "reference_code": reference_code,
        })

        logger.info(f"Bank transfer reference {reference_code} issued to {current_user.email} for {format_gyd(request.amount_gyd)}")
        amount_display = format_gyd(request.amount_gyd)
        return {
            "success": True,
            "reference_code": reference_code,
            "amount_gyd": request.amount_gyd,
            "amount_usd": reference.amount_usd,
            "amount_display": amount_display,
            "plan_type": request.plan_type,
            "expires_at": expires_at,
            "expires_in_hours": settings.reference_expiry_hours,
            "bank_details": settings.bank_details,
            "payment_instructions": [
                f"Transfer exactly {amount_display} to the bank account shown.",
                f"Enter reference code {reference_code} as the payment description.",
                f"Complete the transfer within {settings.reference_expiry_hours} hours, before the reference expires.",
                "Your plan is activated as soon as our team confirms the transfer.",
            ],
            "user_info": {
                "user_id": str(current_user.id),
                "email": current_user.email,
                "name": current_user.full_name,
            },
        }

    async def _expire_if_lapsed(self, reference: PaymentReference, now: datetime) -> bool:
        """Mark a lapsed pending reference (and its history row) as expired."""
        if reference.status != ReferenceStatus.PENDING or not reference.is_expired(now):
            return False

        reference.status = ReferenceStatus.EXPIRED
        history = await self.history_repo.get_by_reference_code(reference.reference_code)
        if history and history.status == PaymentStatus.PENDING:
            history.status = PaymentStatus.EXPIRED
            await self._save(reference, history)
        else:
            await self._save(reference)
        logger.info(f"Payment reference {reference.reference_code} expired")
        return True

    async def get_reference(self, reference_code: str, current_user: User) -> Dict[str, Any]:
        """
        Status of one of the caller's references.

        Raises:
            NotFoundError: If the code is unknown or belongs to someone else
        """
        reference = await self.reference_repo.get_by_code(reference_code)
        if not reference or reference.user_id != current_user.id:
            raise NotFoundError("Payment reference", reference_code)

        now = utc_now()
        await self._expire_if_lapsed(reference, now)
        return reference_to_response(reference, now)

    async def get_history(self, current_user: User) -> List[PaymentHistory]:
        return await self.history_repo.get_for_user(current_user.id)

    async def list_admin_payments(
        self,
        admin: User,
        status: Optional[PaymentStatus] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Dict[str, Any]], int, Optional[str]]:
        """
        Payments visible to an admin, scoped by the payer's country.

        Returns:
            Tuple of (payment dicts with payer details, total, country_filter)
        """
        permissions = get_user_permissions(admin)
        if not permissions.can_view_payments:
            raise InsufficientPermissionsError("view payments")

        country_filter = get_country_filter(permissions)
        rows, total = await self.history_repo.list_for_admin(
            country_id=country_filter,
            status=status,
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        payments = [
            {
                **payment.to_dict(),
                "payer_email": payer.email,
                "payer_name": payer.full_name,
                "payer_country_id": payer.country_id,
            }
            for payment, payer in rows
        ]
        return payments, total, country_filter

    async def _get_reference_for_decision(self, reference_code: str, admin: User) -> Tuple[PaymentReference, User]:
        permissions = get_user_permissions(admin)
        if not permissions.can_accept_payments:
            raise InsufficientPermissionsError("verify payments")

        reference = await self.reference_repo.get_by_code(reference_code)
        if not reference:
            raise NotFoundError("Payment reference", reference_code)

        payer = await self.user_repo.get_by_id(reference.user_id)
        if not payer:
            raise NotFoundError("User", str(reference.user_id))

        if not can_access_country_data(permissions, payer.country_id):
            raise CountryAccessError(payer.country_id)

        if await self._expire_if_lapsed(reference, utc_now()):
            raise PaymentReferenceExpiredError(reference.reference_code)

        if reference.status != ReferenceStatus.PENDING:
            raise BadRequestError(
                f"Payment reference {reference.reference_code} is already {reference.status.value}"
            )
        return reference, payer

    async def verify_reference(self, reference_code: str, admin: User, notes: Optional[str] = None) -> Dict[str, Any]:
        """
        Confirm a received bank transfer.

        Subscription and listing payments activate the payer's subscription; featured-upgrade
        payments leave it alone. Featured credits included with the plan are added to the
        payer's balance, at least one for an upgrade.

        Raises:
            InsufficientPermissionsError: If the admin cannot accept payments
            CountryAccessError: If the payer is in another country
            PaymentReferenceExpiredError: If the reference lapsed
            BadRequestError: If the reference was already decided
        """
        reference, payer = await self._get_reference_for_decision(reference_code, admin)
        history = await self.history_repo.get_by_reference_code(reference.reference_code)
        plan = await self.pricing_repo.get_by_id(reference.plan_id) if reference.plan_id else None
        is_upgrade = derive_payment_type(reference.plan_type) == PaymentType.FEATURED_UPGRADE or (
            plan is not None and plan.plan_type == PlanType.FEATURED_UPGRADE
        )
        credits = plan.featured_listings_included if plan else 0
        if is_upgrade:
            credits = max(credits, 1)

        try:
            now = utc_now()
            reference.status = ReferenceStatus.COMPLETED
            if not is_upgrade:
                payer.subscription_status = SubscriptionStatus.ACTIVE
                if reference.plan_id:
                    payer.subscription_plan_id = reference.plan_id
            payer.featured_credits = (payer.featured_credits or 0) + credits
            to_refresh = [reference, payer]
            if history:
                history.status = PaymentStatus.COMPLETED
                history.verified_by = admin.id
                history.verified_at = now
                history.notes = notes
                to_refresh.append(history)
            await self._save(*to_refresh)
        except Exception as e:
            logger.error(f"Failed to verify payment {reference_code}: {e}")
            raise BadRequestError(f"Failed to verify payment: {str(e)}")

        logger.info(
            f"Payment {reference.reference_code} verified by {admin.email} for {payer.email}: "
            f"{'featured upgrade' if is_upgrade else 'subscription activated'}, {credits} featured credits"
        )
        await self.audit.record(admin, "payment_verified", "payment_reference", reference.reference_code, {
            "amount_gyd": reference.amount_gyd,
            "plan_type": reference.plan_type,
            "payer_id": payer.id,
            "featured_credits_granted": credits,
            "notes": notes,
        })
        await self.notifier.send_template(
            payer.email,
            "payment_confirmation",
            amount_gyd=reference.amount_gyd,
            reference_code=reference.reference_code,
            plan_type=reference.plan_type,
        )
        return reference_to_response(reference)

    async def reject_reference(self, reference_code: str, admin: User, notes: Optional[str] = None) -> Dict[str, Any]:
        """Cancel a pending reference whose transfer never arrived or did not match."""
        reference, payer = await self._get_reference_for_decision(reference_code, admin)
        history = await self.history_repo.get_by_reference_code(reference.reference_code)

        try:
            reference.status = ReferenceStatus.CANCELLED
            to_refresh = [reference]
            if history:
                history.status = PaymentStatus.FAILED
                history.verified_by = admin.id
                history.verified_at = utc_now()
                history.notes = notes
                to_refresh.append(history)
            await self._save(*to_refresh)
        except Exception as e:
            logger.error(f"Failed to reject payment {reference_code}: {e}")
            raise BadRequestError(f"Failed to reject payment: {str(e)}")

        logger.info(f"Payment {reference.reference_code} rejected by {admin.email}")
        await self.audit.record(admin, "payment_rejected", "payment_reference", reference.reference_code, {
            "amount_gyd": reference.amount_gyd,
            "payer_id": payer.id,
            "notes": notes,
        })
        return reference_to_response(reference)
