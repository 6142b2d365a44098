"""
ParcelBD Backend — Payment History Service Tests
=================================================
"""

import pytest

from parcelbd.schemas.payment import PaymentHistoryCreate
from parcelbd.services.payment_history_service import PaymentHistoryService


def _entry(email="u@example.com", intent="pi_1", amount=1500):
    return PaymentHistoryCreate(
        parcel_id="p-1",
        user_email=email,
        amount=amount,
        payment_intent_id=intent,
    )


class TestPaymentHistoryService:

    def setup_method(self):
        self.service = PaymentHistoryService()

    @pytest.mark.asyncio
    async def test_record_sets_status_and_timestamp(self, db_session):
        result = await self.service.record(db_session, _entry())
        assert result.acknowledged is True

        [saved] = await self.service.list_all(db_session)
        assert saved.id == result.inserted_id
        assert saved.payment_status == "paid"
        assert saved.created_at is not None
        assert saved.amount == 1500
        assert saved.payment_intent_id == "pi_1"

    @pytest.mark.asyncio
    async def test_list_by_user_filters_and_orders_newest_first(self, db_session):
        await self.service.record(db_session, _entry(intent="pi_1"))
        await self.service.record(db_session, _entry(email="other@example.com", intent="pi_2"))
        await self.service.record(db_session, _entry(intent="pi_3"))

        mine = await self.service.list_by_user(db_session, "u@example.com")
        assert [r.payment_intent_id for r in mine] == ["pi_3", "pi_1"]

        everything = await self.service.list_all(db_session)
        assert [r.payment_intent_id for r in everything] == ["pi_3", "pi_2", "pi_1"]

    @pytest.mark.asyncio
    async def test_duplicate_intent_is_stored_twice(self, db_session):
        await self.service.record(db_session, _entry(intent="pi_dup"))
        await self.service.record(db_session, _entry(intent="pi_dup"))
        assert len(await self.service.list_all(db_session)) == 2

    @pytest.mark.asyncio
    async def test_unknown_user_has_empty_history(self, db_session):
        assert await self.service.list_by_user(db_session, "nobody@example.com") == []

    @pytest.mark.asyncio
    async def test_response_serializes_camel_case(self, db_session):
        await self.service.record(db_session, _entry())
        [saved] = await self.service.list_all(db_session)

        payload = saved.model_dump(by_alias=True)
        assert set(payload) == {
            "_id", "parcelId", "userEmail", "amount",
            "paymentIntentId", "paymentStatus", "createdAt",
        }
