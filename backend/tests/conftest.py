"""
ParcelBD Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure unit tests
    ├── database:        in-memory SQLite Database with all tables created
    ├── db_session:      a real AsyncSession on that database
    ├── fake_gateway:    FakePaymentGateway recording every call
    └── test_client:     HTTPX AsyncClient bound to an app built on the above
"""

import os

# Override settings for testing BEFORE any parcelbd import.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["PAYMENT_GATEWAY_KEY"] = "sk_test_not_real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DB_CREATE_ALL"] = "false"

from typing import List, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from parcelbd.database import Database  # noqa: E402
from parcelbd.exceptions import PaymentGatewayError, ValidationError  # noqa: E402
from parcelbd.services.payment_base import PaymentGateway  # noqa: E402


class FakePaymentGateway(PaymentGateway):
    """
    In-process PaymentGateway for endpoint tests.

    Set `fail_with` to a message to make the next calls raise
    PaymentGatewayError, the way a Stripe rejection surfaces.
    """

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.calls: List[int] = []
        self.fail_with: Optional[str] = None

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        if not amount_in_cents:
            raise ValidationError(message="Amount is required", field="amountInCents")
        self.calls.append(amount_in_cents)
        if self.fail_with:
            raise PaymentGatewayError(message=self.fail_with)
        return f"pi_fake_{len(self.calls)}_secret_{amount_in_cents}"

    def is_configured(self) -> bool:
        return self.configured


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = parcel
        result = await parcel_service.get_parcel(mock_db_session, parcel_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory SQLite database with the full schema."""
    db = Database("sqlite+aiosqlite://", echo=False)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """A real AsyncSession for service-level tests against SQLite."""
    async with database.session() as session:
        yield session


@pytest.fixture
def fake_gateway():
    return FakePaymentGateway()


@pytest_asyncio.fixture
async def test_client(database, fake_gateway):
    """
    Provides an async HTTP test client for endpoint testing.

    The app is built with the test database and fake gateway injected.
    raise_app_exceptions=False lets the catch-all 500 handler's response
    reach the test instead of re-raising.
    """
    from parcelbd.main import create_app

    app = create_app(database=database, payment_gateway=fake_gateway)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
