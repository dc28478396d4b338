"""Metric computers.

Each computer is a pure function of a ``MetricInput``: the decoded orders of
the reporting window, the product catalog joined for those orders and the
optional seller scope. Malformed or unknown per-order data is skipped, never
raised.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Sequence

from seller_analytics.services.catalog import ProductCatalog
from seller_analytics.services.date_range import DateRange, as_utc, month_key
from seller_analytics.services.order_items import ExtractedOrder, OrderedItem

CENTS = Decimal("0.01")

STATUS_COMPLETED = "Completed"
STATUS_CANCELLED = "Cancelled"
STATUS_FULFILLED = "Fulfilled"


class SellerScope(str, Enum):
    """How a seller restriction selects items."""
    ITEM = "item"        # embedded ``sellerId`` on the ordered item
    CATALOG = "catalog"  # ``Product.seller_id`` of the referenced product


@dataclass
class MetricInput:
    orders: Sequence[ExtractedOrder]
    catalog: ProductCatalog
    date_range: DateRange
    seller_id: Optional[int] = None
    seller_scope: SellerScope = SellerScope.CATALOG
    previous_orders: Sequence[ExtractedOrder] = field(default_factory=tuple)
    count: int = 0
    top_n: int = 5

    def items_of(self, order: ExtractedOrder) -> list[OrderedItem]:
        """Items of ``order`` that survive the seller scope."""
        if self.seller_id is None:
            return list(order.items)
        if self.seller_scope is SellerScope.ITEM:
            return [i for i in order.items if i.seller_id == self.seller_id]
        return [i for i in order.items if self.catalog.belongs_to_seller(i.product_id, self.seller_id)]

    def qualifies(self, order: ExtractedOrder) -> bool:
        """Order has at least one in-scope item that resolves to a product."""
        return any(self.catalog.knows(i.product_id) for i in self.items_of(order))


# ── Helpers ─────────────────────────────────────────

def _order_revenue(inp: MetricInput, order: ExtractedOrder) -> Decimal:
    total = Decimal("0")
    for item in inp.items_of(order):
        price = inp.catalog.price_of(item.product_id)
        if price is not None:
            total += price * item.quantity
    return total


def _revenue(inp: MetricInput) -> Decimal:
    return sum((_order_revenue(inp, o) for o in inp.orders), Decimal("0"))


def _count_qualifying(inp: MetricInput, orders: Sequence[ExtractedOrder], status: str, attr: str) -> int:
    return sum(
        1 for o in orders
        if getattr(o.order, attr) == status and inp.qualifies(o)
    )


def _top(totals: dict, limit: int) -> list[list]:
    # sorted() is stable, so equal totals keep first-seen order
    ranked = sorted(totals.items(), key=lambda x: x[1], reverse=True)
    return [[pid, value] for pid, value in ranked[:limit]]


def percentage_change(previous: int, current: int) -> Decimal:
    """Percent change from ``previous`` to ``current``, two decimals."""
    if previous == 0:
        return Decimal("100") if current > 0 else Decimal("0")
    change = (Decimal(current) - Decimal(previous)) / Decimal(previous) * 100
    return change.quantize(CENTS, rounding=ROUND_HALF_UP)


def serialize_order(order: ExtractedOrder) -> dict:
    o = order.order
    return {
        "id": o.id,
        "userId": o.user_id,
        "orderedAt": as_utc(o.ordered_at).isoformat(),
        "orderedItems": [item.to_dict() for item in order.items],
        "orderingStatus": o.ordering_status,
        "orderFulfillmentStatus": o.order_fulfillment_status,
    }


# ── Revenue ─────────────────────────────────────────

def total_revenue(inp: MetricInput) -> dict:
    return {"totalRevenue": _revenue(inp)}


def monthly_revenue(inp: MetricInput) -> list[dict]:
    buckets: dict[str, Decimal] = {}
    for order in inp.orders:
        items = [i for i in inp.items_of(order) if inp.catalog.price_of(i.product_id) is not None]
        if not items:
            continue
        key = month_key(order.order.ordered_at)
        buckets[key] = buckets.get(key, Decimal("0")) + _order_revenue(inp, order)
    return [{"month": month, "revenue": buckets[month]} for month in sorted(buckets)]


def average_monthly_revenue(inp: MetricInput) -> dict:
    months = max(1, inp.date_range.months)
    return {"averageMonthlyRevenue": _revenue(inp) / months}


# ── Customers & Orders ──────────────────────────────

def total_users(inp: MetricInput) -> dict:
    users = {o.order.user_id for o in inp.orders if inp.qualifies(o)}
    return {"totalUsers": len(users)}


def total_orders_fulfilled(inp: MetricInput) -> dict:
    count = _count_qualifying(inp, inp.orders, STATUS_FULFILLED, "order_fulfillment_status")
    return {"totalOrdersFulfilled": count}


def total_orders_cancelled(inp: MetricInput) -> dict:
    count = _count_qualifying(inp, inp.orders, STATUS_CANCELLED, "ordering_status")
    return {"totalOrdersCancelled": count}


def fulfilled_orders(inp: MetricInput) -> list[dict]:
    """Fulfilled order count per month."""
    buckets: dict[str, int] = defaultdict(int)
    for order in inp.orders:
        if order.order.order_fulfillment_status != STATUS_FULFILLED or not inp.qualifies(order):
            continue
        buckets[month_key(order.order.ordered_at)] += 1
    return [{"month": month, "fulfilledOrders": buckets[month]} for month in sorted(buckets)]


def percentage_orders_lost(inp: MetricInput) -> dict:
    current = _count_qualifying(inp, inp.orders, STATUS_CANCELLED, "ordering_status")
    previous = _count_qualifying(inp, inp.previous_orders, STATUS_CANCELLED, "ordering_status")
    return {"percentageOrdersLost": percentage_change(previous, current)}


def percentage_orders_gained(inp: MetricInput) -> dict:
    current = _count_qualifying(inp, inp.orders, STATUS_COMPLETED, "ordering_status")
    previous = _count_qualifying(inp, inp.previous_orders, STATUS_COMPLETED, "ordering_status")
    return {"percentageOrdersGained": percentage_change(previous, current)}


def recent_orders(inp: MetricInput) -> dict:
    """Most recent orders that reference at least one known product."""
    ordered = sorted(inp.orders, key=lambda o: as_utc(o.order.ordered_at), reverse=True)
    return {"recentOrders": [serialize_order(o) for o in ordered if inp.qualifies(o)]}


def weekly_orders(inp: MetricInput) -> dict:
    return {"weeklyOrders": inp.count}


def total_products(inp: MetricInput) -> dict:
    return {"totalProducts": inp.count}


# ── Top Products ────────────────────────────────────

def top_revenue_generating_products(inp: MetricInput) -> dict:
    revenue: dict[str, Decimal] = {}
    for order in inp.orders:
        for item in inp.items_of(order):
            price = inp.catalog.price_of(item.product_id)
            if price is None:
                continue
            revenue[item.product_id] = revenue.get(item.product_id, Decimal("0")) + price * item.quantity
    return {"topRevenueGeneratingProducts": _top(revenue, inp.top_n)}


def top_selling_products(inp: MetricInput) -> dict:
    sold: dict[str, int] = {}
    for order in inp.orders:
        for item in inp.items_of(order):
            if not inp.catalog.knows(item.product_id):
                continue
            sold[item.product_id] = sold.get(item.product_id, 0) + item.quantity
    return {"topSellingProducts": _top(sold, inp.top_n)}
