"""Test fixtures."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from seller_analytics.database import Base, get_session_factory
from seller_analytics.main import app
from seller_analytics.models import Order, Product
from seller_analytics.repositories.base import OrderRecord, ProductRecord
from seller_analytics.repositories.memory import InMemoryDataSource

# In-memory SQLite shared by all sessions of one test
TEST_DB_URL = "sqlite+aiosqlite://"

# Fixed clock for deterministic windows
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def products():
    """Catalog: two sellers plus one unowned product."""
    return [
        ProductRecord(id="A", price=Decimal("10.00"), seller_id=1),
        ProductRecord(id="B", price=Decimal("25.50"), seller_id=1),
        ProductRecord(id="C", price=Decimal("4.00"), seller_id=2),
        ProductRecord(id="D", price=Decimal("100.00"), seller_id=None),
    ]


@pytest.fixture
def orders():
    """Orders spread over March-June 2024, including malformed blobs."""
    return [
        OrderRecord(
            id=1, user_id=100, ordered_at=utc(2024, 3, 15, 9),
            ordered_items=[{"productId": "A", "quantity": 2, "sellerId": 1}],
            ordering_status="Completed", order_fulfillment_status="Fulfilled",
        ),
        OrderRecord(
            id=2, user_id=101, ordered_at=utc(2024, 4, 2, 10),
            ordered_items='[{"productId": "A", "quantity": 1, "sellerId": 1},'
                          ' {"productId": "C", "quantity": 5, "sellerId": 2}]',
            ordering_status="Completed", order_fulfillment_status="Fulfilled",
        ),
        OrderRecord(
            id=3, user_id=100, ordered_at=utc(2024, 4, 20, 18),
            ordered_items=[{"productId": "B", "quantity": 2, "sellerId": 1}],
            ordering_status="Cancelled", order_fulfillment_status="Unfulfilled",
        ),
        OrderRecord(
            id=4, user_id=102, ordered_at=utc(2024, 5, 5, 8),
            ordered_items="{not json",
            ordering_status="Completed", order_fulfillment_status="Fulfilled",
        ),
        OrderRecord(
            id=5, user_id=103, ordered_at=utc(2024, 5, 10, 14),
            ordered_items=[{"productId": "ghost", "quantity": 3}],
            ordering_status="Cancelled", order_fulfillment_status="Unfulfilled",
        ),
        OrderRecord(
            id=6, user_id=104, ordered_at=utc(2024, 6, 12, 11),
            ordered_items=[{"productId": "D", "quantity": 1}, {"productId": "C", "quantity": 2, "sellerId": 2}],
            ordering_status="Completed", order_fulfillment_status="Fulfilled",
        ),
    ]


@pytest.fixture
def source(orders, products):
    return InMemoryDataSource(orders, products)


@pytest_asyncio.fixture
async def seeded_factory(session_factory, orders, products):
    """``session_factory`` with the order and product fixtures stored."""
    async with session_factory() as session:
        for p in products:
            session.add(Product(id=p.id, name=f"Product {p.id}", price=p.price, seller_id=p.seller_id))
        for o in orders:
            session.add(Order(
                id=o.id,
                user_id=o.user_id,
                ordered_at=o.ordered_at,
                ordered_items=o.ordered_items,
                ordering_status=o.ordering_status,
                order_fulfillment_status=o.order_fulfillment_status,
            ))
        await session.commit()
    return session_factory
