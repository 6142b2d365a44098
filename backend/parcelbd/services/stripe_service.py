"""
ParcelBD Backend — Stripe Payment Gateway
==========================================

What:  PaymentGateway implementation backed by Stripe PaymentIntents.
How:   Calls `stripe.PaymentIntent.create` with the configured currency and
       automatic payment methods enabled, then returns `client_secret`.
       The Stripe SDK is synchronous, so the call runs in the thread pool.
Who:   Created once by create_app(); shared by all requests.

Failure handling:
    stripe.StripeError  → PaymentGatewayError carrying the provider message
    anything else       → PaymentGatewayError carrying str(error)
    There is no retry: a retried create without an idempotency key could
    produce two intents for one checkout.
"""

import logging
import time
from typing import Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from parcelbd.config import settings
from parcelbd.exceptions import PaymentGatewayError, ValidationError
from parcelbd.services.payment_base import PaymentGateway

logger = logging.getLogger(__name__)


class StripePaymentGateway(PaymentGateway):
    """
    Stripe-backed payment gateway.

    The API key is passed per request rather than assigned to the global
    `stripe.api_key`, so several gateways (tests, multiple accounts) can
    coexist in one process.
    """

    def __init__(self, api_key: Optional[str] = None, currency: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.payment_gateway_key
        self.currency = (currency or settings.payment_currency).lower()

        if not self.api_key:
            logger.warning("Stripe secret key not set - payment intents will fail")
        else:
            logger.info("StripePaymentGateway initialized (mode=%s, currency=%s)",
                        self.mode, self.currency)

    @property
    def mode(self) -> str:
        """'test', 'live' or 'unknown', detected from the key prefix."""
        if not self.api_key:
            return "unknown"
        if self.api_key.startswith("sk_test_"):
            return "test"
        if self.api_key.startswith("sk_live_"):
            return "live"
        return "unknown"

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        if not amount_in_cents:
            raise ValidationError(message="Amount is required", field="amountInCents")

        start_time = time.perf_counter()
        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                amount=amount_in_cents,
                currency=self.currency,
                automatic_payment_methods={"enabled": True},
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            # user_message is set for card errors; fall back to the raw message.
            message = getattr(e, "user_message", None) or str(e)
            logger.error("Stripe error creating payment intent: %s", message)
            raise PaymentGatewayError(
                message=message,
                context={"provider": "stripe", "error_type": type(e).__name__},
            )
        except Exception as e:
            logger.error("Unexpected error creating payment intent: %s", str(e), exc_info=True)
            raise PaymentGatewayError(
                message=str(e),
                context={"provider": "stripe", "error_type": type(e).__name__},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Payment intent %s created for %d %s in %.0fms",
            intent.id,
            amount_in_cents,
            self.currency,
            duration_ms,
        )
        return intent.client_secret
