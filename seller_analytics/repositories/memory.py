"""In-memory analytics data source.

Works with plain records (no DB dependency) so the engine can run over
fixtures, exports or test data.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Sequence

from seller_analytics.repositories.base import OrderCriteria, OrderRecord, ProductRecord
from seller_analytics.services.date_range import DateRange, as_utc
from seller_analytics.services.order_items import extract_ordered_items, has_seller_item

logger = logging.getLogger(__name__)


def _parse_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class InMemoryDataSource:
    """Analytics data source over lists of order and product records."""

    def __init__(
        self,
        orders: Sequence[OrderRecord] = (),
        products: Sequence[ProductRecord] = (),
    ):
        self._orders = list(orders)
        self._products = {p.id: p for p in products}

    @classmethod
    def from_dicts(cls, orders: Iterable[dict], products: Iterable[dict]) -> "InMemoryDataSource":
        """Build from camelCase dicts as exported by the storefront API."""
        order_records = []
        for o in orders:
            ordered_at = _parse_datetime(o.get("orderedAt"))
            if ordered_at is None:
                logger.warning(f"Skipping order {o.get('id')!r}: unreadable orderedAt")
                continue
            order_records.append(OrderRecord(
                id=o.get("id"),
                user_id=o.get("userId"),
                ordered_at=ordered_at,
                ordered_items=o.get("orderedItems"),
                ordering_status=o.get("orderingStatus", "") or "",
                order_fulfillment_status=o.get("orderFulfillmentStatus", "") or "",
            ))

        product_records = []
        for p in products:
            if p.get("id") is None:
                logger.warning(f"Skipping product without id: {p!r}")
                continue
            try:
                price = Decimal(str(p.get("price", 0)))
            except InvalidOperation:
                logger.warning(f"Skipping product {p.get('id')!r}: invalid price")
                continue
            product_records.append(ProductRecord(id=str(p["id"]), price=price, seller_id=p.get("sellerId")))

        return cls(order_records, product_records)

    def _matches_seller(self, order: OrderRecord, seller_id: Optional[int]) -> bool:
        if seller_id is None:
            return True
        return has_seller_item(extract_ordered_items(order.ordered_items), seller_id)

    async def find_orders(self, date_range: DateRange, seller_id: Optional[int] = None) -> list[OrderRecord]:
        found = [
            o for o in self._orders
            if date_range.contains(o.ordered_at) and self._matches_seller(o, seller_id)
        ]
        return sorted(found, key=lambda o: as_utc(o.ordered_at))

    async def find_recent_orders(self, limit: int, seller_id: Optional[int] = None) -> list[OrderRecord]:
        newest_first = sorted(self._orders, key=lambda o: as_utc(o.ordered_at), reverse=True)
        return [o for o in newest_first if self._matches_seller(o, seller_id)][:limit]

    async def find_products_by_ids(self, ids: Iterable[str]) -> list[ProductRecord]:
        return [self._products[pid] for pid in ids if pid in self._products]

    async def count_orders(self, criteria: OrderCriteria) -> int:
        count = 0
        for o in self._orders:
            at = as_utc(o.ordered_at)
            if criteria.start is not None and at < criteria.start:
                continue
            if criteria.end is not None and at > criteria.end:
                continue
            if criteria.ordering_status is not None and o.ordering_status != criteria.ordering_status:
                continue
            if criteria.fulfillment_status is not None and o.order_fulfillment_status != criteria.fulfillment_status:
                continue
            if not self._matches_seller(o, criteria.seller_id):
                continue
            count += 1
        return count

    async def count_products(self, seller_id: Optional[int] = None) -> int:
        if seller_id is None:
            return len(self._products)
        return sum(1 for p in self._products.values() if p.seller_id == seller_id)
