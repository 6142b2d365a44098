"""
ParcelBD Backend — Parcel Service (Parcel Store Adapter)
=========================================================

What:  list / get / create / update / delete / mark_paid over the `parcels` table.
How:   Each operation is one query against the session it is given.
       Reads treat identifiers that are not valid UUIDs as absent; writes
       addressed by such identifiers fail with InvalidIdentifierError (500).
Who:   Called by the /parcels route handlers.

Document mapping:
    client field       column
    ─────────────      ─────────────
    _id                id            (server generated, ignored on input)
    sender_name        sender_name
    receiver_name      receiver_name
    user_email         user_email
    payment_status     payment_status
    paidAt             paid_at       (server managed, ignored on input)
    anything else      extra (JSON)

Column fields sent with a non-string value are kept verbatim in `extra` and
returned as sent. The column then holds a string projection: str(value) for
sender_name / receiver_name (NOT NULL), NULL for user_email / payment_status.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parcelbd.exceptions import (
    DatabaseError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
)
from parcelbd.models.parcel import PAYMENT_STATUS_PAID, Parcel, generate_parcel_id
from parcelbd.schemas.common import DeleteResult, InsertResult, UpdateResult

logger = logging.getLogger(__name__)

# Client fields stored in dedicated columns.
COLUMN_FIELDS = ("sender_name", "receiver_name", "user_email", "payment_status")
# Client fields the server owns; silently dropped from request bodies.
SERVER_FIELDS = ("_id", "paidAt")
REQUIRED_FIELDS = ("sender_name", "receiver_name")


def parse_parcel_id(parcel_id: str) -> Optional[str]:
    """Canonical form of `parcel_id`, or None when it is not a valid identifier."""
    try:
        return str(uuid.UUID(str(parcel_id)))
    except ValueError:
        return None


def _require_parcel_id(parcel_id: str, action: str) -> str:
    canonical_id = parse_parcel_id(parcel_id)
    if canonical_id is None:
        logger.error("Cannot %s parcel: malformed id %r", action, parcel_id)
        raise InvalidIdentifierError(parcel_id, action)
    return canonical_id


def _column_projection(key: str, value: Any) -> Optional[str]:
    """String stored in the column for a non-string client value."""
    if key in REQUIRED_FIELDS:
        return "" if value is None else str(value)
    return None


class ParcelService:
    """
    Persistence operations for parcels.

    Error Handling Strategy:
        Missing sender/receiver raises ValidationError (400), missing rows on
        get and mark_paid raise NotFoundError (404), malformed ids on writes
        raise InvalidIdentifierError (500), SQLAlchemy failures are wrapped in
        DatabaseError (500) carrying the driver's message.
    """

    # ── Serialization ─────────────────────────────────────────────────────

    @staticmethod
    def to_document(parcel: Parcel) -> Dict[str, Any]:
        """Render a Parcel as the flat JSON document clients work with."""
        extra = parcel.extra or {}
        document: Dict[str, Any] = dict(extra)
        document["_id"] = parcel.id
        for key in REQUIRED_FIELDS:
            if key not in extra:
                document[key] = getattr(parcel, key)
        if parcel.user_email is not None:
            document["user_email"] = parcel.user_email
        if parcel.payment_status is not None:
            document["payment_status"] = parcel.payment_status
        if parcel.paid_at is not None:
            document["paidAt"] = parcel.paid_at
        return document

    @staticmethod
    def _split_fields(fields: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Separate column values from extra fields, dropping server fields."""
        columns: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in fields.items():
            if key in SERVER_FIELDS:
                continue
            if key in COLUMN_FIELDS:
                if isinstance(value, str):
                    columns[key] = value
                else:
                    columns[key] = _column_projection(key, value)
                    extra[key] = value
            else:
                extra[key] = value
        return columns, extra

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_parcels(
        self, db: AsyncSession, email: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        All parcels, newest first by insertion order.

        Args:
            email: when given, only parcels whose user_email equals it.
        """
        query = select(Parcel)
        if email:
            query = query.where(Parcel.user_email == email)
        query = query.order_by(Parcel.seq.desc())

        try:
            result = await db.execute(query)
            parcels = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Error fetching parcels: %s", str(e), exc_info=True)
            raise DatabaseError(
                message=f"Failed to fetch parcels: {e}",
                context={"email": email},
            )

        return [self.to_document(parcel) for parcel in parcels]

    async def _find(self, db: AsyncSession, canonical_id: str) -> Optional[Parcel]:
        result = await db.execute(select(Parcel).where(Parcel.id == canonical_id))
        return result.scalar_one_or_none()

    async def get_parcel(self, db: AsyncSession, parcel_id: str) -> Dict[str, Any]:
        """
        One parcel by id.

        Raises:
            NotFoundError: unknown id, or id that is not a valid identifier (→ 404)
        """
        canonical_id = parse_parcel_id(parcel_id)
        parcel = None
        if canonical_id is not None:
            try:
                parcel = await self._find(db, canonical_id)
            except SQLAlchemyError as e:
                logger.error("Error fetching parcel %s: %s", parcel_id, str(e), exc_info=True)
                raise DatabaseError(
                    message=f"Failed to fetch parcel: {e}",
                    context={"parcel_id": parcel_id},
                )

        if parcel is None:
            raise NotFoundError(
                resource="parcel",
                resource_id=parcel_id,
                message="Parcel not found",
            )
        return self.to_document(parcel)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_parcel(self, db: AsyncSession, fields: Dict[str, Any]) -> InsertResult:
        """
        Insert a new parcel.

        Raises:
            ValidationError: sender_name or receiver_name missing or empty (→ 400).
                Nothing is written in that case.
        """
        for field in REQUIRED_FIELDS:
            if not fields.get(field):
                raise ValidationError(message="Sender & Receiver required!", field=field)

        columns, extra = self._split_fields(fields)
        parcel = Parcel(id=generate_parcel_id(), extra=extra, **columns)

        try:
            db.add(parcel)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error adding parcel: %s", str(e), exc_info=True)
            raise DatabaseError(message=f"Failed to add parcel: {e}")

        logger.info("Parcel created: %s", parcel.id)
        return InsertResult(inserted_id=parcel.id)

    async def update_parcel(
        self, db: AsyncSession, parcel_id: str, fields: Dict[str, Any]
    ) -> UpdateResult:
        """
        Merge `fields` into an existing parcel.

        An unknown id is not an error: the result reports matched_count=0.
        modified_count is 1 only when the rendered document actually changed.

        Raises:
            InvalidIdentifierError: `parcel_id` is not a valid identifier (→ 500)
        """
        canonical_id = _require_parcel_id(parcel_id, "update")
        columns, extra = self._split_fields(fields)

        try:
            parcel = await self._find(db, canonical_id)
            if parcel is None:
                logger.info("Update for unknown parcel %s ignored", parcel_id)
                return UpdateResult(matched_count=0, modified_count=0)

            before = self.to_document(parcel)
            merged = dict(parcel.extra or {})
            for key, value in columns.items():
                setattr(parcel, key, value)
                if key not in extra:
                    # A string value replaces any verbatim copy kept earlier.
                    merged.pop(key, None)
            merged.update(extra)
            # Reassign so the JSON column is flagged dirty.
            parcel.extra = merged

            modified = self.to_document(parcel) != before
            if modified:
                await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error updating parcel %s: %s", parcel_id, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Failed to update parcel: {e}",
                context={"parcel_id": parcel_id},
            )

        return UpdateResult(matched_count=1, modified_count=1 if modified else 0)

    async def delete_parcel(self, db: AsyncSession, parcel_id: str) -> DeleteResult:
        """
        Physically remove a parcel. Unknown ids report deleted_count=0.

        Raises:
            InvalidIdentifierError: `parcel_id` is not a valid identifier (→ 500)
        """
        canonical_id = _require_parcel_id(parcel_id, "delete")

        try:
            result = await db.execute(delete(Parcel).where(Parcel.id == canonical_id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error deleting parcel %s: %s", parcel_id, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Failed to delete parcel: {e}",
                context={"parcel_id": parcel_id},
            )

        deleted = result.rowcount or 0
        if deleted:
            logger.info("Parcel deleted: %s", canonical_id)
        return DeleteResult(deleted_count=deleted)

    async def mark_paid(self, db: AsyncSession, parcel_id: str) -> UpdateResult:
        """
        Set payment_status=paid and paidAt=now on an unpaid parcel.

        The update only matches parcels not already paid, so an absent parcel
        and an already-paid parcel both modify zero rows and are reported the
        same way.

        Raises:
            InvalidIdentifierError: `parcel_id` is not a valid identifier (→ 500)
            NotFoundError: "Parcel not found or already paid" (→ 404)
        """
        canonical_id = _require_parcel_id(parcel_id, "mark paid")

        statement = (
            update(Parcel)
            .where(
                Parcel.id == canonical_id,
                or_(
                    Parcel.payment_status.is_(None),
                    Parcel.payment_status != PAYMENT_STATUS_PAID,
                ),
            )
            .values(
                payment_status=PAYMENT_STATUS_PAID,
                paid_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session="evaluate")
        )
        try:
            result = await db.execute(statement)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error marking parcel %s paid: %s", parcel_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Internal Server Error",
                context={"parcel_id": parcel_id},
            )

        modified = result.rowcount or 0
        if modified == 0:
            raise NotFoundError(
                resource="parcel",
                resource_id=parcel_id,
                message="Parcel not found or already paid",
            )

        logger.info("Parcel %s marked as paid", canonical_id)
        return UpdateResult(matched_count=modified, modified_count=modified)


parcel_service = ParcelService()
