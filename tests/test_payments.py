"""
Tests for card payment intents, bank-transfer references and admin reconciliation.
"""

import pytest
import re
import uuid
from datetime import timedelta
from types import SimpleNamespace

import stripe

from app.config import settings
from app.models.payment import PaymentStatus, ReferenceStatus, PaymentMethod, PaymentType
from app.models.pricing import PlanType
from app.models.user import SubscriptionStatus
from app.repositories.payment import PaymentHistoryRepository, PaymentReferenceRepository
from app.schemas.payment import PaymentIntentRequest, BankTransferRequest
from app.services.audit import AuditService
from app.services.payment import PaymentService
from app.services.payment_gateway import PaymentGatewayClient
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import (
    BadRequestError,
    CountryAccessError,
    ExternalServiceError,
    InsufficientPermissionsError,
    NotFoundError,
    PaymentReferenceExpiredError
)
from tests.conftest import PlanFactory, RecordingStripeClient


@pytest.fixture
def payment_service(db_session, gateway, notifier) -> PaymentService:
    return PaymentService(db_session, gateway, notifier)


async def _expire(db_session, reference_code: str) -> None:
    reference = await PaymentReferenceRepository(db_session).get_by_code(reference_code)
    reference.expires_at = utc_now() - timedelta(minutes=1)
    await db_session.commit()


def _gateway(**kwargs) -> PaymentGatewayClient:
    return PaymentGatewayClient(secret_key="sk_test", client=RecordingStripeClient([], **kwargs))


class TestPaymentGatewayClient:

    @pytest.mark.asyncio
    async def test_creates_intent_with_sdk_params(self, gateway, gateway_requests):
        intent = await gateway.create_payment_intent(
            amount_cents=7143, currency="USD", receipt_email="agent@example.com", metadata={"plan": "Agent Monthly"}
        )

        assert intent == {"id": "pi_123", "client_secret": "pi_123_secret"}
        assert gateway_requests == [{
            "amount": 7143,
            "currency": "usd",
            "automatic_payment_methods": {"enabled": True},
            "metadata": {"plan": "Agent Monthly"},
            "receipt_email": "agent@example.com",
        }]

    @pytest.mark.asyncio
    async def test_unconfigured_gateway(self):
        client = PaymentGatewayClient(secret_key="")
        assert client.configured is False
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.create_payment_intent(amount_cents=100, currency="usd")
        assert exc_info.value.status_code == 502

    def test_builds_sdk_client_from_secret_key(self):
        client = PaymentGatewayClient(secret_key="sk_test_123")
        assert client.configured is True
        assert isinstance(client._stripe(), stripe.StripeClient)

    @pytest.mark.asyncio
    async def test_card_error_maps_to_external_service_error(self):
        client = _gateway(error=stripe.CardError("Your card was declined.", None, "card_declined"))
        with pytest.raises(ExternalServiceError, match="Your card was declined."):
            await client.create_payment_intent(amount_cents=100, currency="usd")

    @pytest.mark.asyncio
    async def test_gateway_unreachable(self):
        client = _gateway(error=stripe.APIConnectionError("Network error"))
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.create_payment_intent(amount_cents=100, currency="usd")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_missing_client_secret(self):
        client = _gateway(intent=SimpleNamespace(id="pi_1", client_secret=None))
        with pytest.raises(ExternalServiceError):
            await client.create_payment_intent(amount_cents=100, currency="usd")


class TestPaymentIntent:

    @pytest.mark.asyncio
    async def test_intent_converts_gyd_and_records_history(self, db_session, payment_service, test_agent):
        result = await payment_service.create_payment_intent(
            PaymentIntentRequest(amount=21000, email=test_agent.email, plan="Agent Monthly"), test_agent
        )

        assert result == {"client_secret": "pi_123_secret", "payment_intent_id": "pi_123", "amount_usd_cents": 10000}
        history = await PaymentHistoryRepository(db_session).get_for_user(test_agent.id)
        assert len(history) == 1
        assert history[0].payment_method == PaymentMethod.CARD
        assert history[0].payment_type == PaymentType.SUBSCRIPTION
        assert history[0].external_id == "pi_123"
        assert history[0].status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_anonymous_intent_records_nothing(self, db_session, payment_service, gateway_requests):
        await payment_service.create_payment_intent(
            PaymentIntentRequest(amount=15000, email="guest@example.com", plan="FSBO Basic Listing")
        )
        assert len(gateway_requests) == 1
        _, total = await PaymentHistoryRepository(db_session).list_for_admin()
        assert total == 0

    @pytest.mark.asyncio
    async def test_missing_fields(self, payment_service, gateway_requests):
        with pytest.raises(BadRequestError, match="Missing required fields: email, plan"):
            await payment_service.create_payment_intent(PaymentIntentRequest(amount=15000))
        assert gateway_requests == []

    @pytest.mark.asyncio
    async def test_non_positive_amount(self, payment_service):
        with pytest.raises(BadRequestError):
            await payment_service.create_payment_intent(
                PaymentIntentRequest(amount=-5, email="guest@example.com", plan="Agent Monthly")
            )


class TestBankTransfer:

    @pytest.mark.asyncio
    async def test_reference_issued_with_instructions(self, db_session, payment_service, test_agent):
        plan_id = uuid.uuid4()
        result = await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly", plan_id=str(plan_id)), test_agent
        )

        assert re.fullmatch(r"PHH-\d{6}-[A-Z0-9]{6}", result["reference_code"])
        assert result["amount_usd"] == 7143
        assert result["amount_display"] == "G$15,000"
        assert result["expires_in_hours"] == settings.reference_expiry_hours
        assert result["bank_details"]["account_number"] == settings.bank_account_number
        assert len(result["payment_instructions"]) == 4
        assert result["reference_code"] in result["payment_instructions"][1]
        assert result["user_info"]["email"] == test_agent.email

        history = await PaymentHistoryRepository(db_session).get_by_reference_code(result["reference_code"])
        assert history.payment_method == PaymentMethod.BANK_TRANSFER
        assert history.status == PaymentStatus.PENDING

        reference = await PaymentReferenceRepository(db_session).get_by_code(result["reference_code"])
        assert reference.plan_id == plan_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [settings.payment_min_amount - 1, settings.payment_max_amount + 1])
    async def test_amount_limits(self, payment_service, test_agent, amount):
        with pytest.raises(BadRequestError, match="Amount must be between"):
            await payment_service.create_bank_transfer(
                BankTransferRequest(amount_gyd=amount, plan_type="Agent Monthly"), test_agent
            )

    @pytest.mark.asyncio
    async def test_required_fields(self, payment_service, test_agent):
        with pytest.raises(BadRequestError, match="required"):
            await payment_service.create_bank_transfer(BankTransferRequest(amount_gyd=15000), test_agent)

    @pytest.mark.asyncio
    async def test_invalid_plan_id(self, payment_service, test_agent):
        with pytest.raises(BadRequestError, match="Invalid plan_id"):
            await payment_service.create_bank_transfer(
                BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly", plan_id="nope"), test_agent
            )

    @pytest.mark.asyncio
    async def test_pending_reference_limit(self, db_session, payment_service, test_agent):
        request = BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly")
        codes = [
            (await payment_service.create_bank_transfer(request, test_agent))["reference_code"]
            for _ in range(settings.max_pending_references_per_user)
        ]
        with pytest.raises(BadRequestError, match="pending payment references"):
            await payment_service.create_bank_transfer(request, test_agent)

        await _expire(db_session, codes[0])
        assert (await payment_service.create_bank_transfer(request, test_agent))["success"] is True

    @pytest.mark.asyncio
    async def test_get_reference_marks_expiry(self, db_session, payment_service, test_agent):
        result = await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly"), test_agent
        )
        code = result["reference_code"]

        current = await payment_service.get_reference(code.lower(), test_agent)
        assert current["status"] == "pending"
        assert current["is_expired"] is False

        await _expire(db_session, code)
        expired = await payment_service.get_reference(code, test_agent)
        assert expired["status"] == "expired"
        assert expired["is_expired"] is True
        history = await PaymentHistoryRepository(db_session).get_by_reference_code(code)
        assert history.status == PaymentStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_reference_hidden_from_other_users(self, payment_service, test_agent, other_agent):
        result = await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly"), test_agent
        )
        with pytest.raises(NotFoundError):
            await payment_service.get_reference(result["reference_code"], other_agent)


class TestPaymentReconciliation:

    @pytest.mark.asyncio
    async def test_verify_activates_subscription(self, db_session, payment_service, notifier, test_agent, gy_basic_admin):
        plan_id = uuid.uuid4()
        issued = await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly", plan_id=str(plan_id)), test_agent
        )
        code = issued["reference_code"]

        verified = await payment_service.verify_reference(code, gy_basic_admin, "Seen on statement")

        assert verified["status"] == "completed"
        assert test_agent.subscription_status == SubscriptionStatus.ACTIVE
        assert test_agent.subscription_plan_id == plan_id

        history = await PaymentHistoryRepository(db_session).get_by_reference_code(code)
        assert history.status == PaymentStatus.COMPLETED
        assert history.verified_by == gy_basic_admin.id
        assert history.notes == "Seen on statement"

        audit = await AuditService(db_session).repo.get_for_target("payment_reference", code)
        assert [entry.action_type for entry in audit] == ["payment_verified"]
        assert notifier.subjects_for(test_agent.email) == ["Payment Confirmation - Portal Home Hub"]

        with pytest.raises(BadRequestError, match="already completed"):
            await payment_service.verify_reference(code, gy_basic_admin)

    @pytest.mark.asyncio
    async def test_verify_grants_included_featured_credits(self, db_session, payment_service, test_agent, gy_basic_admin):
        plan = await PlanFactory.create(db_session, plan_name="Agent Pro Monthly", featured_listings_included=3)
        code = (await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Pro Monthly", plan_id=str(plan.id)), test_agent
        ))["reference_code"]

        await payment_service.verify_reference(code, gy_basic_admin)

        assert test_agent.subscription_status == SubscriptionStatus.ACTIVE
        assert test_agent.featured_credits == 3
        audit = await AuditService(db_session).repo.get_for_target("payment_reference", code)
        assert audit[0].details["featured_credits_granted"] == 3

    @pytest.mark.asyncio
    async def test_verify_featured_upgrade_adds_credit_only(self, db_session, payment_service, test_agent, gy_basic_admin):
        plan = await PlanFactory.create(
            db_session, plan_name="Featured Boost", plan_type=PlanType.FEATURED_UPGRADE, price=500_000
        )
        test_agent.featured_credits = 2
        await db_session.commit()
        status_before = test_agent.subscription_status
        code = (await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=5000, plan_type="Featured Boost", plan_id=str(plan.id)), test_agent
        ))["reference_code"]

        await payment_service.verify_reference(code, gy_basic_admin)

        assert test_agent.featured_credits == 3
        assert test_agent.subscription_status == status_before
        assert test_agent.subscription_plan_id is None

    @pytest.mark.asyncio
    async def test_reject_cancels_reference(self, db_session, payment_service, test_agent, super_admin):
        code = (await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly"), test_agent
        ))["reference_code"]

        rejected = await payment_service.reject_reference(code, super_admin, "No matching transfer")

        assert rejected["status"] == "cancelled"
        assert test_agent.subscription_status == SubscriptionStatus.NONE
        history = await PaymentHistoryRepository(db_session).get_by_reference_code(code)
        assert history.status == PaymentStatus.FAILED

    @pytest.mark.asyncio
    async def test_expired_reference_cannot_be_verified(self, db_session, payment_service, test_agent, gy_basic_admin):
        code = (await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly"), test_agent
        ))["reference_code"]
        await _expire(db_session, code)

        with pytest.raises(PaymentReferenceExpiredError) as exc_info:
            await payment_service.verify_reference(code, gy_basic_admin)
        assert exc_info.value.status_code == 410

        reference = await PaymentReferenceRepository(db_session).get_by_code(code)
        assert reference.status == ReferenceStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_other_country_admin_cannot_verify(self, payment_service, test_agent, jm_owner_admin):
        code = (await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly"), test_agent
        ))["reference_code"]
        with pytest.raises(CountryAccessError):
            await payment_service.verify_reference(code, jm_owner_admin)

    @pytest.mark.asyncio
    async def test_non_admin_cannot_verify(self, payment_service, test_agent, other_agent):
        code = (await payment_service.create_bank_transfer(
            BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly"), test_agent
        ))["reference_code"]
        with pytest.raises(InsufficientPermissionsError):
            await payment_service.verify_reference(code, other_agent)

    @pytest.mark.asyncio
    async def test_unknown_reference(self, payment_service, super_admin):
        with pytest.raises(NotFoundError):
            await payment_service.verify_reference("PHH-000000-ZZZZZZ", super_admin)

    @pytest.mark.asyncio
    async def test_admin_payment_list_is_country_scoped(self, payment_service, test_agent, jm_agent, jm_owner_admin, super_admin):
        request = BankTransferRequest(amount_gyd=15000, plan_type="Agent Monthly")
        await payment_service.create_bank_transfer(request, test_agent)
        await payment_service.create_bank_transfer(request, jm_agent)

        jm_payments, jm_total, jm_filter = await payment_service.list_admin_payments(jm_owner_admin)
        assert (jm_total, jm_filter) == (1, "JM")
        assert jm_payments[0]["payer_email"] == jm_agent.email
        assert jm_payments[0]["payer_country_id"] == "JM"

        _, all_total, all_filter = await payment_service.list_admin_payments(super_admin)
        assert (all_total, all_filter) == (2, None)
