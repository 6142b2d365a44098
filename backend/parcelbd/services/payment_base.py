"""
ParcelBD Backend — Abstract Payment Gateway Interface
======================================================

What:  Abstract base class for payment providers.
How:   Concrete gateways inherit from PaymentGateway and implement
       create_payment_intent() and is_configured().
Who:   Called by the POST /create-payment-intent route and the health check.

Implementations:
    - StripePaymentGateway: Stripe PaymentIntents (default)
    - Test doubles in tests/conftest.py, injected through create_app()
"""

from abc import ABC, abstractmethod


class PaymentGateway(ABC):
    """
    Contract for creating payment intents.

    Contract:
        - create_payment_intent() takes an amount in cents and returns the
          client secret the browser needs to confirm the payment
        - A missing or zero amount raises ValidationError before any provider call
        - Provider failures are wrapped in PaymentGatewayError
        - No retries and no idempotency keys: one call, one intent
    """

    @abstractmethod
    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """
        Create a payment intent and return its client secret.

        Raises:
            ValidationError: amount_in_cents is missing or falsy.
            PaymentGatewayError: the provider rejected or failed the request.
        """
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present. Does not contact the provider."""
        ...
