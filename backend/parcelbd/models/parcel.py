"""
ParcelBD Backend — Parcel SQLAlchemy Model
===========================================

What:  ORM model for the `parcels` table.
Who:   Used by ParcelService for CRUD and by Alembic for schema management.

Table Design:
    - seq: autoincrementing insertion sequence; listings sort on it (newest first)
    - id: public identifier (UUID string), exposed to clients as `_id`
    - sender_name / receiver_name: the only validated fields
    - user_email: indexed, it is the list filter
    - payment_status / paid_at: unset until the parcel is marked paid
    - extra: every other client field, stored verbatim as JSON
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parcelbd.database import Base

PAYMENT_STATUS_PAID = "paid"


def generate_parcel_id() -> str:
    return str(uuid.uuid4())


class Parcel(Base):
    """
    A delivery record with sender/receiver and payment status.

    Lifecycle:
        1. Inserted by POST /parcels (payment_status unset)
        2. Freely updated in place by PUT /parcels/{id}
        3. Marked paid once by POST /parcels/{id}/paid (unpaid → paid, one-way)
        4. Physically removed by DELETE /parcels/{id}
    """

    __tablename__ = "parcels"

    seq: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Insertion sequence used for newest-first ordering",
    )

    id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        default=generate_parcel_id,
        comment="Public parcel identifier (UUID)",
    )

    sender_name: Mapped[str] = mapped_column(Text, nullable=False)
    receiver_name: Mapped[str] = mapped_column(Text, nullable=False)

    user_email: Mapped[Optional[str]] = mapped_column(
        String(320),
        nullable=True,
        comment="Owner email; used as the list filter",
    )

    payment_status: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="unpaid | paid; NULL until set",
    )

    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the parcel was marked paid",
    )

    extra: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Arbitrary client-supplied fields",
    )

    __table_args__ = (
        Index("idx_parcels_user_email", "user_email"),
    )

    def __repr__(self) -> str:
        return (
            f"<Parcel(id={self.id}, sender='{self.sender_name}', "
            f"receiver='{self.receiver_name}', payment_status={self.payment_status!r})>"
        )
