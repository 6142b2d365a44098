"""
ParcelBD Backend — Parcel Route Handlers
=========================================

What:  CRUD over /parcels plus POST /parcels/{id}/paid.
How:   Extracts path/query/body, delegates to ParcelService, returns JSON.
Who:   Called by the frontend's parcel list, booking form and checkout flow.

Request bodies are free-form JSON objects: only sender_name and
receiver_name are checked, every other field is stored as sent.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from parcelbd.database import get_db_session
from parcelbd.schemas.common import DeleteResult, ErrorResponse, InsertResult, UpdateResult
from parcelbd.schemas.parcel import MarkPaidResponse, ParcelDocument
from parcelbd.services.parcel_service import parcel_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.get(
    "",
    response_model=List[ParcelDocument],
    summary="List parcels, newest first",
    responses={500: {"description": "Server error", "model": ErrorResponse}},
)
async def list_parcels(
    email: Optional[str] = Query(
        default=None,
        description="Only return parcels whose user_email equals this value",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[Dict[str, Any]]:
    return await parcel_service.list_parcels(db, email=email)


@router.get(
    "/{parcel_id}",
    response_model=ParcelDocument,
    summary="Get a single parcel by ID",
    responses={
        404: {"description": "Parcel not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)
async def get_parcel(
    parcel_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    """Malformed identifiers are reported as 404, the same as unknown ones."""
    return await parcel_service.get_parcel(db, parcel_id)


@router.post(
    "",
    response_model=InsertResult,
    summary="Add a new parcel",
    responses={
        400: {"description": "sender_name or receiver_name missing", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)
async def create_parcel(
    parcel: Dict[str, Any] = Body(..., description="Parcel fields"),
    db: AsyncSession = Depends(get_db_session),
) -> InsertResult:
    return await parcel_service.create_parcel(db, parcel)


@router.put(
    "/{parcel_id}",
    response_model=UpdateResult,
    summary="Update a parcel",
    description=(
        "Merges the given fields into the parcel. An unknown ID is not an error: "
        "the result reports matchedCount 0."
    ),
)
async def update_parcel(
    parcel_id: str,
    fields: Dict[str, Any] = Body(..., description="Fields to set"),
    db: AsyncSession = Depends(get_db_session),
) -> UpdateResult:
    return await parcel_service.update_parcel(db, parcel_id, fields)


@router.delete(
    "/{parcel_id}",
    response_model=DeleteResult,
    summary="Delete a parcel",
    description="Physically removes the parcel. deletedCount is 0 when nothing matched.",
)
async def delete_parcel(
    parcel_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResult:
    return await parcel_service.delete_parcel(db, parcel_id)


@router.post(
    "/{parcel_id}/paid",
    response_model=MarkPaidResponse,
    summary="Mark a parcel as paid",
    responses={
        404: {"description": "Parcel not found or already paid", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)
async def mark_parcel_paid(
    parcel_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MarkPaidResponse:
    """
    Sets payment_status to "paid" and stamps paidAt.

    Recording the payment in /payments/history is a separate call made by
    the client afterwards.
    """
    result = await parcel_service.mark_paid(db, parcel_id)
    return MarkPaidResponse(update_parcel=result)
