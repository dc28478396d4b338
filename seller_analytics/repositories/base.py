"""Read-only data access contract used by the analytics engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol, Sequence

from seller_analytics.services.date_range import DateRange


@dataclass(frozen=True)
class OrderRecord:
    """Order row as seen by analytics. ``ordered_items`` is the raw blob."""
    id: Any
    user_id: Optional[int]
    ordered_at: datetime
    ordered_items: Any = None
    ordering_status: str = ""
    order_fulfillment_status: str = ""


@dataclass(frozen=True)
class ProductRecord:
    id: str
    price: Decimal = Decimal("0")
    seller_id: Optional[int] = None


@dataclass(frozen=True)
class OrderCriteria:
    """Filter predicate for order counts, expressed as data."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    seller_id: Optional[int] = None
    ordering_status: Optional[str] = None
    fulfillment_status: Optional[str] = None


class AnalyticsDataSource(Protocol):
    """Collaborator the engine reads orders and products from."""

    async def find_orders(
        self, date_range: DateRange, seller_id: Optional[int] = None,
    ) -> Sequence[OrderRecord]: ...

    async def find_recent_orders(
        self, limit: int, seller_id: Optional[int] = None,
    ) -> Sequence[OrderRecord]: ...

    async def find_products_by_ids(self, ids: Iterable[str]) -> Sequence[ProductRecord]: ...

    async def count_orders(self, criteria: OrderCriteria) -> int: ...

    async def count_products(self, seller_id: Optional[int] = None) -> int: ...
