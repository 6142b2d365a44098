"""
ParcelBD Backend — Payment Route Handlers
==========================================

What:  POST /create-payment-intent, POST /payments/history,
       GET /payments/user/{email}, GET /payments/all.
Who:   Called by the frontend checkout form and payment history pages.

Checkout sequence driven by the client:
    1. POST /create-payment-intent      → clientSecret
    2. (browser confirms the card with Stripe.js)
    3. POST /parcels/{id}/paid          → parcel flagged paid
    4. POST /payments/history           → history row appended
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from parcelbd.database import get_db_session
from parcelbd.schemas.common import ErrorResponse
from parcelbd.schemas.payment import (
    PaymentHistoryCreate,
    PaymentHistoryResponse,
    PaymentHistorySaved,
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from parcelbd.services.payment_base import PaymentGateway
from parcelbd.services.payment_history_service import payment_history_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


def get_payment_gateway(request: Request) -> PaymentGateway:
    """FastAPI dependency returning the gateway built by create_app()."""
    return request.app.state.payment_gateway


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    summary="Create a Stripe payment intent",
    responses={
        400: {"description": "amountInCents missing", "model": ErrorResponse},
        500: {"description": "Payment provider error", "model": ErrorResponse},
    },
)
async def create_payment_intent(
    body: Optional[PaymentIntentRequest] = None,
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> PaymentIntentResponse:
    amount_in_cents = body.amount_in_cents if body else None
    client_secret = await gateway.create_payment_intent(amount_in_cents)
    return PaymentIntentResponse(client_secret=client_secret)


@router.post(
    "/payments/history",
    status_code=201,
    response_model=PaymentHistorySaved,
    summary="Save a payment history record",
)
async def save_payment_history(
    entry: PaymentHistoryCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PaymentHistorySaved:
    result = await payment_history_service.record(db, entry)
    return PaymentHistorySaved(result=result)


@router.get(
    "/payments/user/{email}",
    response_model=List[PaymentHistoryResponse],
    summary="Payment history for one user, newest first",
)
async def list_user_payments(
    email: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[PaymentHistoryResponse]:
    return await payment_history_service.list_by_user(db, email)


@router.get(
    "/payments/all",
    response_model=List[PaymentHistoryResponse],
    summary="All payment history, newest first",
)
async def list_all_payments(
    db: AsyncSession = Depends(get_db_session),
) -> List[PaymentHistoryResponse]:
    return await payment_history_service.list_all(db)
