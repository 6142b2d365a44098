"""
ParcelBD Backend — Payment History SQLAlchemy Model
====================================================

What:  ORM model for the append-only `paymentHistory` table.
Who:   Written and read by PaymentHistoryService.

Notes:
    - parcel_id is a plain string: no foreign key, the parcel may not exist
    - payment_intent_id is not unique: the same intent can be recorded twice
    - rows are never updated or deleted through the API
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from parcelbd.database import Base


class PaymentRecord(Base):
    """One completed payment event."""

    __tablename__ = "paymentHistory"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        default=lambda: str(uuid.uuid4()),
    )

    parcel_id: Mapped[Optional[str]] = mapped_column("parcelId", String(64), nullable=True)
    user_email: Mapped[Optional[str]] = mapped_column("userEmail", String(320), nullable=True)

    # Stored as JSON so integer cents and decimal amounts both round-trip unchanged.
    amount: Mapped[Optional[float]] = mapped_column(JSON, nullable=True)

    payment_intent_id: Mapped[Optional[str]] = mapped_column(
        "paymentIntentId", String(255), nullable=True
    )
    payment_status: Mapped[str] = mapped_column(
        "paymentStatus", String(20), nullable=False, default="paid"
    )

    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_payment_history_user_email", "userEmail"),
        Index("idx_payment_history_created_at", "createdAt"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentRecord(id={self.id}, parcel_id={self.parcel_id}, "
            f"amount={self.amount}, created_at='{self.created_at}')>"
        )
