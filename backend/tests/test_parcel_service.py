"""
ParcelBD Backend — Parcel Service Tests
========================================

What:  Tests for ParcelService (list, get, create, update, delete, mark_paid).
How:   Validation paths use a mock session; persistence paths run against
       an in-memory SQLite database.
"""

import uuid

import pytest
from unittest.mock import MagicMock

from parcelbd.exceptions import InvalidIdentifierError, NotFoundError, ValidationError
from parcelbd.models.parcel import Parcel
from parcelbd.services.parcel_service import ParcelService, parse_parcel_id


class TestParseParcelId:

    def test_valid_uuid_is_canonicalized(self):
        raw = str(uuid.uuid4())
        assert parse_parcel_id(raw.upper()) == raw

    def test_malformed_id_returns_none(self):
        assert parse_parcel_id("not-an-id") is None
        assert parse_parcel_id("") is None


class TestParcelServiceCreate:
    """Validation happens before the session is touched."""

    def setup_method(self):
        self.service = ParcelService()

    @pytest.mark.asyncio
    async def test_missing_sender_rejected(self, mock_db_session):
        with pytest.raises(ValidationError, match="Sender & Receiver required"):
            await self.service.create_parcel(mock_db_session, {"receiver_name": "B"})
        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_receiver_rejected(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.create_parcel(
                mock_db_session, {"sender_name": "A", "receiver_name": ""}
            )
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_string_column_value_kept_verbatim(self, mock_db_session):
        await self.service.create_parcel(
            mock_db_session,
            {"sender_name": 7, "receiver_name": "B", "user_email": 42},
        )

        added = mock_db_session.add.call_args.args[0]
        assert added.sender_name == "7"
        assert added.user_email is None
        assert added.extra == {"sender_name": 7, "user_email": 42}

        document = ParcelService.to_document(added)
        assert document["sender_name"] == 7
        assert document["user_email"] == 42

    @pytest.mark.asyncio
    async def test_create_splits_columns_and_extra(self, mock_db_session):
        result = await self.service.create_parcel(
            mock_db_session,
            {
                "_id": "client-chosen",
                "sender_name": "A",
                "receiver_name": "B",
                "user_email": "a@example.com",
                "weight": 2.5,
                "type": "document",
            },
        )

        added = mock_db_session.add.call_args.args[0]
        assert isinstance(added, Parcel)
        assert added.sender_name == "A"
        assert added.user_email == "a@example.com"
        assert added.extra == {"weight": 2.5, "type": "document"}
        assert result.inserted_id == added.id
        assert parse_parcel_id(result.inserted_id) == result.inserted_id
        mock_db_session.commit.assert_awaited_once()


class TestParcelServiceGet:

    def setup_method(self):
        self.service = ParcelService()

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found_without_query(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_parcel(mock_db_session, "12345")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(NotFoundError, match="Parcel not found"):
            await self.service.get_parcel(mock_db_session, str(uuid.uuid4()))

    def test_to_document_merges_extra_fields(self):
        parcel = Parcel(
            id=str(uuid.uuid4()),
            sender_name="A",
            receiver_name="B",
            user_email=None,
            payment_status=None,
            paid_at=None,
            extra={"cost": 120},
        )
        document = ParcelService.to_document(parcel)
        assert document == {
            "_id": parcel.id,
            "sender_name": "A",
            "receiver_name": "B",
            "cost": 120,
        }


class TestParcelServiceWithDatabase:
    """Round trips through a real (SQLite) session."""

    def setup_method(self):
        self.service = ParcelService()

    async def _create(self, db, **fields):
        body = {"sender_name": "A", "receiver_name": "B"}
        body.update(fields)
        result = await self.service.create_parcel(db, body)
        return result.inserted_id

    @pytest.mark.asyncio
    async def test_list_newest_first_and_filtered(self, db_session):
        first = await self._create(db_session, user_email="x@example.com")
        second = await self._create(db_session, user_email="y@example.com")
        third = await self._create(db_session, user_email="x@example.com")

        everything = await self.service.list_parcels(db_session)
        assert [p["_id"] for p in everything] == [third, second, first]

        only_x = await self.service.list_parcels(db_session, email="x@example.com")
        assert [p["_id"] for p in only_x] == [third, first]
        assert all(p["user_email"] == "x@example.com" for p in only_x)

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, db_session):
        parcel_id = await self._create(db_session, weight=1)

        result = await self.service.update_parcel(
            db_session, parcel_id, {"receiver_name": "C", "status": "in_transit"}
        )
        assert result.matched_count == 1
        assert result.modified_count == 1

        document = await self.service.get_parcel(db_session, parcel_id)
        assert document["receiver_name"] == "C"
        assert document["status"] == "in_transit"
        assert document["weight"] == 1

    @pytest.mark.asyncio
    async def test_update_with_same_values_modifies_nothing(self, db_session):
        parcel_id = await self._create(db_session, weight=1)
        result = await self.service.update_parcel(db_session, parcel_id, {"weight": 1})
        assert result.matched_count == 1
        assert result.modified_count == 0

    @pytest.mark.asyncio
    async def test_update_unknown_id_is_silent_noop(self, db_session):
        result = await self.service.update_parcel(
            db_session, str(uuid.uuid4()), {"sender_name": "Z"}
        )
        assert result.matched_count == 0
        assert result.modified_count == 0

    @pytest.mark.asyncio
    async def test_delete_reports_count(self, db_session):
        parcel_id = await self._create(db_session)

        assert (await self.service.delete_parcel(db_session, parcel_id)).deleted_count == 1
        assert (await self.service.delete_parcel(db_session, parcel_id)).deleted_count == 0
        with pytest.raises(InvalidIdentifierError, match="Failed to delete parcel"):
            await self.service.delete_parcel(db_session, "garbage")

        with pytest.raises(NotFoundError):
            await self.service.get_parcel(db_session, parcel_id)

    @pytest.mark.asyncio
    async def test_mark_paid_is_one_way(self, db_session):
        parcel_id = await self._create(db_session, payment_status="unpaid")

        result = await self.service.mark_paid(db_session, parcel_id)
        assert result.modified_count == 1

        document = await self.service.get_parcel(db_session, parcel_id)
        assert document["payment_status"] == "paid"
        assert document["paidAt"] is not None

        with pytest.raises(NotFoundError, match="already paid"):
            await self.service.mark_paid(db_session, parcel_id)

    @pytest.mark.asyncio
    async def test_mark_paid_unknown_parcel(self, db_session):
        with pytest.raises(NotFoundError, match="Parcel not found or already paid"):
            await self.service.mark_paid(db_session, str(uuid.uuid4()))
        with pytest.raises(InvalidIdentifierError):
            await self.service.mark_paid(db_session, "not-a-uuid")

    @pytest.mark.asyncio
    async def test_update_malformed_id_fails(self, db_session):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            await self.service.update_parcel(db_session, "12345", {"weight": 2})
        assert exc_info.value.status_code == 500
        assert "not a valid parcel identifier" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_string_update_replaces_verbatim_value(self, db_session):
        parcel_id = await self._create(db_session, payment_status=False)
        assert (await self.service.get_parcel(db_session, parcel_id))["payment_status"] is False

        result = await self.service.update_parcel(
            db_session, parcel_id, {"payment_status": "unpaid"}
        )
        assert result.modified_count == 1

        document = await self.service.get_parcel(db_session, parcel_id)
        assert document["payment_status"] == "unpaid"
        await self.service.mark_paid(db_session, parcel_id)
        assert (await self.service.get_parcel(db_session, parcel_id))["payment_status"] == "paid"
