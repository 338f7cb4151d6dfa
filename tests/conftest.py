"""
RetailOps Ledger - Test Configuration

Pytest fixtures and configuration.

Every test gets its own in-memory SQLite database with the full schema
and, where requested, the default chart of accounts.
"""

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (register mappers)
from app.database import Base, get_async_session
from app.models.counterparty import Client, Supplier
from app.models.inventory import Product, Store
from app.services.account_registry import AccountRegistry
from app.services.chart_of_accounts_service import ChartOfAccountsService
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Fixed business date so aging and period maths are deterministic
BUSINESS_DATE = date(2026, 6, 30)


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Let SQLAlchemy own BEGIN so SAVEPOINTs behave like on PostgreSQL
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def chart(db_session: AsyncSession):
    """Seed the default chart of accounts."""
    accounts = await ChartOfAccountsService(db_session).seed_default_chart()
    await db_session.commit()
    return {account.account_code: account for account in accounts}


@pytest_asyncio.fixture
async def registry(db_session: AsyncSession, chart) -> AccountRegistry:
    return await AccountRegistry.load(db_session)


@pytest_asyncio.fixture
async def client_party(db_session: AsyncSession) -> Client:
    """A client buying on account."""
    party = Client(name="Amani Traders", email="accounts@amani.example", tax_pin="P051234567A")
    db_session.add(party)
    await db_session.commit()
    return party


@pytest_asyncio.fixture
async def second_client(db_session: AsyncSession) -> Client:
    party = Client(name="Baraka Stores")
    db_session.add(party)
    await db_session.commit()
    return party


@pytest_asyncio.fixture
async def supplier(db_session: AsyncSession) -> Supplier:
    """A supplier selling on account."""
    party = Supplier(name="Coastal Wholesalers", email="sales@coastal.example")
    db_session.add(party)
    await db_session.commit()
    return party


@pytest_asyncio.fixture
async def product(db_session: AsyncSession) -> Product:
    item = Product(
        sku="KET-001",
        name="Electric Kettle",
        cost_price=Decimal("60.00"),
        selling_price=Decimal("100.00"),
    )
    db_session.add(item)
    await db_session.commit()
    return item


@pytest_asyncio.fixture
async def store(db_session: AsyncSession) -> Store:
    shop = Store(name="Main Street Store")
    db_session.add(shop)
    await db_session.commit()
    return shop


@pytest_asyncio.fixture
async def damage_store(db_session: AsyncSession) -> Store:
    shop = Store(name="Damages Store", is_damage_store=True)
    db_session.add(shop)
    await db_session.commit()
    return shop


# ===========================================
# HELPERS
# ===========================================

async def count_rows(db: AsyncSession, model) -> int:
    """Row count that does not touch any loaded (possibly expired) instance."""
    return await db.scalar(select(func.count()).select_from(model))


def money(value) -> Decimal:
    """Decimal from a JSON number or string."""
    return Decimal(str(value))


@pytest.fixture
def business_date() -> date:
    return BUSINESS_DATE
