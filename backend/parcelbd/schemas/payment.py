"""
ParcelBD Backend — Payment Schemas
===================================

What:  Request/response models for payment intents and payment history.
How:   camelCase on the wire (`amountInCents`, `paymentIntentId`, `createdAt`),
       snake_case in Python.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from parcelbd.schemas.common import CAMEL_CONFIG, InsertResult


# ══════════════════════════════════════════════════════════════════════════
# Payment Intents
# ══════════════════════════════════════════════════════════════════════════


class PaymentIntentRequest(BaseModel):
    """
    Body of POST /create-payment-intent.

    amount_in_cents is not type-checked here: a missing or zero amount is
    rejected by the gateway adapter with a 400, anything else goes to Stripe,
    which rejects non-integer amounts itself.
    """
    model_config = CAMEL_CONFIG

    amount_in_cents: Optional[Any] = Field(
        default=None,
        description="Amount to charge in the smallest currency unit (cents)",
    )


class PaymentIntentResponse(BaseModel):
    model_config = CAMEL_CONFIG

    client_secret: str = Field(description="Secret the browser uses to confirm the payment")


# ══════════════════════════════════════════════════════════════════════════
# Payment History
# ══════════════════════════════════════════════════════════════════════════


class PaymentHistoryCreate(BaseModel):
    """
    Body of POST /payments/history. No field is required and no field is
    type-checked; the service stores identifiers as strings.
    """
    model_config = CAMEL_CONFIG

    parcel_id: Optional[Any] = None
    user_email: Optional[Any] = None
    amount: Optional[Any] = None
    payment_intent_id: Optional[Any] = None


class PaymentHistoryResponse(BaseModel):
    """One payment history record as returned by the listing endpoints."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str = Field(alias="_id")
    parcel_id: Optional[str] = None
    user_email: Optional[str] = None
    amount: Optional[Any] = None
    payment_intent_id: Optional[str] = None
    payment_status: str = "paid"
    created_at: datetime


class PaymentHistorySaved(BaseModel):
    """Returned with HTTP 201 by POST /payments/history."""
    message: str = Field(default="Payment history saved successfully")
    result: InsertResult
