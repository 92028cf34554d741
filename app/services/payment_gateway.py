"""
Card payment gateway client.
Creates payment intents with the Stripe SDK's async API.
"""

from typing import Any, Dict, Optional
import logging

import stripe

from app.config import settings
from app.utils.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class PaymentGatewayClient:
    """
    Wraps a StripeClient for the payment-intent calls the API makes.

    The SDK client is built on first use from the configured secret key, using
    its httpx transport for async requests. A ready client can be passed in instead.
    """

    service_name = "Payment gateway"

    def __init__(
        self,
        secret_key: Optional[str] = None,
        client: Optional[stripe.StripeClient] = None,
        timeout: Optional[float] = None
    ):
        self.secret_key = secret_key if secret_key is not None else settings.payment_gateway_secret_key
        self.timeout = timeout or settings.payment_gateway_timeout_seconds
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.secret_key)

    def _stripe(self) -> stripe.StripeClient:
        if self._client is None:
            self._client = stripe.StripeClient(
                self.secret_key,
                http_client=stripe.HTTPXClient(timeout=self.timeout)
            )
        return self._client

    async def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        receipt_email: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Create a payment intent.

        Returns:
            Dict with the intent "id" and its "client_secret"

        Raises:
            ExternalServiceError: If the gateway is unconfigured, unreachable or rejects the request
        """
        if not self.configured:
            raise ExternalServiceError(self.service_name, "gateway is not configured")

        params: Dict[str, Any] = {
            "amount": amount_cents,
            "currency": currency.lower(),
            "automatic_payment_methods": {"enabled": True},
            "metadata": {key: str(value) for key, value in (metadata or {}).items()},
        }
        if receipt_email:
            params["receipt_email"] = receipt_email

        try:
            intent = await self._stripe().v1.payment_intents.create_async(params=params)
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error(f"Payment gateway rejected intent: {type(e).__name__}: {message}")
            raise ExternalServiceError(self.service_name, message)

        client_secret = getattr(intent, "client_secret", None)
        if not client_secret:
            raise ExternalServiceError(self.service_name, "response did not include a client secret")

        logger.info(f"Payment intent created: {intent.id} ({amount_cents} {currency})")
        return {"id": intent.id, "client_secret": client_secret}
