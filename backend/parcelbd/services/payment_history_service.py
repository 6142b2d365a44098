"""
ParcelBD Backend — Payment History Service (Payment History Adapter)
=====================================================================

What:  Append-only log of completed payments: record / list_by_user / list_all.
How:   Inserts set createdAt and paymentStatus server-side; listings are
       newest first (createdAt, then insertion order for equal timestamps).
Who:   Called by the /payments route handlers.

Not done here:
    - No dedup on paymentIntentId; recording the same intent twice stores two rows
    - No check that parcelId refers to an existing parcel
    - No link to the parcel's payment_status; POST /parcels/{id}/paid is a
      separate call and either write can succeed without the other
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcelbd.exceptions import DatabaseError
from parcelbd.models.parcel import PAYMENT_STATUS_PAID
from parcelbd.models.payment import PaymentRecord
from parcelbd.schemas.common import InsertResult
from parcelbd.schemas.payment import PaymentHistoryCreate, PaymentHistoryResponse

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> Optional[str]:
    """Identifier columns are text; other JSON values are stored as str(value)."""
    return None if value is None else str(value)


class PaymentHistoryService:
    """Persistence operations for payment history records."""

    @staticmethod
    def to_response(record: PaymentRecord) -> PaymentHistoryResponse:
        return PaymentHistoryResponse(
            id=record.id,
            parcel_id=record.parcel_id,
            user_email=record.user_email,
            amount=record.amount,
            payment_intent_id=record.payment_intent_id,
            payment_status=record.payment_status,
            created_at=record.created_at,
        )

    async def record(self, db: AsyncSession, entry: PaymentHistoryCreate) -> InsertResult:
        """Insert a payment history record with paymentStatus='paid' and createdAt=now."""
        record = PaymentRecord(
            id=str(uuid.uuid4()),
            parcel_id=_as_text(entry.parcel_id),
            user_email=_as_text(entry.user_email),
            amount=entry.amount,
            payment_intent_id=_as_text(entry.payment_intent_id),
            payment_status=PAYMENT_STATUS_PAID,
            created_at=datetime.now(timezone.utc),
        )

        try:
            db.add(record)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error saving payment history: %s", str(e), exc_info=True)
            raise DatabaseError(message="Internal Server Error")

        logger.info(
            "Payment history saved: parcel=%s intent=%s",
            record.parcel_id,
            record.payment_intent_id,
        )
        return InsertResult(inserted_id=record.id)

    async def _list(
        self, db: AsyncSession, user_email: Optional[str] = None
    ) -> List[PaymentHistoryResponse]:
        query = select(PaymentRecord)
        if user_email is not None:
            query = query.where(PaymentRecord.user_email == user_email)
        query = query.order_by(PaymentRecord.created_at.desc(), PaymentRecord.seq.desc())

        try:
            result = await db.execute(query)
            records = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Error fetching payment history: %s", str(e), exc_info=True)
            raise DatabaseError(message="Internal Server Error")

        return [self.to_response(record) for record in records]

    async def list_by_user(self, db: AsyncSession, email: str) -> List[PaymentHistoryResponse]:
        """Records whose userEmail equals `email`, newest first."""
        return await self._list(db, user_email=email)

    async def list_all(self, db: AsyncSession) -> List[PaymentHistoryResponse]:
        """Every record, newest first. Unrestricted."""
        return await self._list(db)


payment_history_service = PaymentHistoryService()
