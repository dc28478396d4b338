"""SQLAlchemy-backed analytics data source."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seller_analytics.models import Order, Product
from seller_analytics.repositories.base import OrderCriteria, OrderRecord, ProductRecord
from seller_analytics.services.date_range import DateRange
from seller_analytics.services.errors import CollaboratorUnavailable
from seller_analytics.services.order_items import extract_ordered_items, has_seller_item

logger = logging.getLogger(__name__)

_RECENT_PAGE_FACTOR = 5


def _order_record(row: Order) -> OrderRecord:
    return OrderRecord(
        id=row.id,
        user_id=row.user_id,
        ordered_at=row.ordered_at,
        ordered_items=row.ordered_items,
        ordering_status=row.ordering_status or "",
        order_fulfillment_status=row.order_fulfillment_status or "",
    )


def _product_record(row: Product) -> ProductRecord:
    price = Decimal(str(row.price)) if row.price is not None else Decimal("0")
    return ProductRecord(id=row.id, price=price, seller_id=row.seller_id)


def _with_seller(records: Iterable[OrderRecord], seller_id: Optional[int]) -> list[OrderRecord]:
    if seller_id is None:
        return list(records)
    return [r for r in records if has_seller_item(extract_ordered_items(r.ordered_items), seller_id)]


class SqlAlchemyDataSource:
    """Reads orders and products from the database.

    Every query runs in its own session so independent lookups can be
    awaited concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _scalars(self, stmt, operation: str) -> list:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Analytics query failed: {operation} - {e}")
            raise CollaboratorUnavailable(operation, e) from e

    async def _scalar(self, stmt, operation: str) -> int:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Analytics query failed: {operation} - {e}")
            raise CollaboratorUnavailable(operation, e) from e

    async def find_orders(self, date_range: DateRange, seller_id: Optional[int] = None) -> list[OrderRecord]:
        stmt = (
            select(Order)
            .where(Order.ordered_at >= date_range.start, Order.ordered_at <= date_range.end)
            .order_by(Order.ordered_at)
        )
        rows = await self._scalars(stmt, "find_orders")
        return _with_seller((_order_record(r) for r in rows), seller_id)

    async def find_recent_orders(self, limit: int, seller_id: Optional[int] = None) -> list[OrderRecord]:
        newest_first = select(Order).order_by(Order.ordered_at.desc(), Order.id.desc())
        if seller_id is None:
            rows = await self._scalars(newest_first.limit(limit), "find_recent_orders")
            return [_order_record(r) for r in rows]

        # Seller ownership lives inside the JSON blob, so page until enough match
        page = max(limit * _RECENT_PAGE_FACTOR, 1)
        offset = 0
        found: list[OrderRecord] = []
        while len(found) < limit:
            rows = await self._scalars(newest_first.offset(offset).limit(page), "find_recent_orders")
            if not rows:
                break
            found.extend(_with_seller((_order_record(r) for r in rows), seller_id))
            offset += page
        return found[:limit]

    async def find_products_by_ids(self, ids: Iterable[str]) -> list[ProductRecord]:
        ids = list(ids)
        if not ids:
            return []
        rows = await self._scalars(select(Product).where(Product.id.in_(ids)), "find_products_by_ids")
        return [_product_record(r) for r in rows]

    async def count_orders(self, criteria: OrderCriteria) -> int:
        conditions = []
        if criteria.start is not None:
            conditions.append(Order.ordered_at >= criteria.start)
        if criteria.end is not None:
            conditions.append(Order.ordered_at <= criteria.end)
        if criteria.ordering_status is not None:
            conditions.append(Order.ordering_status == criteria.ordering_status)
        if criteria.fulfillment_status is not None:
            conditions.append(Order.order_fulfillment_status == criteria.fulfillment_status)

        if criteria.seller_id is None:
            return await self._scalar(select(func.count(Order.id)).where(*conditions), "count_orders")

        blobs = await self._scalars(select(Order.ordered_items).where(*conditions), "count_orders")
        return sum(1 for raw in blobs if has_seller_item(extract_ordered_items(raw), criteria.seller_id))

    async def count_products(self, seller_id: Optional[int] = None) -> int:
        stmt = select(func.count(Product.id))
        if seller_id is not None:
            stmt = stmt.where(Product.seller_id == seller_id)
        return await self._scalar(stmt, "count_products")
