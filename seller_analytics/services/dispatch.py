"""Metric type registry.

Maps every supported ``MetricType`` to its computer, the order set the
computer needs and the seller scoping rule it applies. The table is built
once at import time and is read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

from seller_analytics.services import metrics
from seller_analytics.services.errors import UnknownMetricType
from seller_analytics.services.metrics import MetricInput, SellerScope


class MetricType(str, Enum):
    MONTHLY_REVENUE = "monthlyRevenue"
    AVERAGE_MONTHLY_REVENUE = "averageMonthlyRevenue"
    TOTAL_REVENUE = "totalRevenue"
    TOTAL_ORDERS_FULFILLED = "totalOrdersFulfilled"
    TOTAL_ORDERS_CANCELLED = "totalOrdersCancelled"
    TOP_REVENUE_GENERATING_PRODUCT = "topRevenueGeneratingProduct"
    TOP_SELLING_PRODUCT = "topSellingProduct"
    TOTAL_USERS = "totalUsers"
    TOTAL_PRODUCTS = "totalProducts"
    WEEKLY_ORDERS = "weeklyOrders"
    FULFILLED_ORDERS = "fulfilledOrders"
    RECENT_ORDERS = "recentOrders"
    PERCENTAGE_ORDERS_LOST = "percentageOrdersLost"
    PERCENTAGE_ORDERS_GAINED = "percentageOrdersGained"


class OrderSource(str, Enum):
    """Which data a metric reads before computing."""
    WINDOW = "window"                # orders in the resolved range
    COMPARISON = "comparison"        # resolved range + range one month earlier
    RECENT = "recent"                # latest orders over all history
    TRAILING_WEEK = "trailing_week"  # order count over the last N days
    PRODUCT_COUNT = "product_count"  # product count

    @property
    def needs_catalog(self) -> bool:
        return self in (OrderSource.WINDOW, OrderSource.COMPARISON, OrderSource.RECENT)


@dataclass(frozen=True)
class MetricDefinition:
    metric_type: MetricType
    compute: Callable[[MetricInput], Any]
    source: OrderSource = OrderSource.WINDOW
    seller_scope: SellerScope = SellerScope.CATALOG


def _table(*definitions: MetricDefinition) -> Mapping[MetricType, MetricDefinition]:
    table = {d.metric_type: d for d in definitions}
    missing = set(MetricType) - set(table)
    if missing:
        names = ", ".join(sorted(m.value for m in missing))
        raise RuntimeError(f"No computer registered for: {names}")
    return MappingProxyType(table)


DISPATCH_TABLE: Mapping[MetricType, MetricDefinition] = _table(
    # Revenue and product rankings scope by product ownership
    MetricDefinition(MetricType.MONTHLY_REVENUE, metrics.monthly_revenue),
    MetricDefinition(MetricType.AVERAGE_MONTHLY_REVENUE, metrics.average_monthly_revenue),
    MetricDefinition(MetricType.TOTAL_REVENUE, metrics.total_revenue),
    MetricDefinition(MetricType.TOP_REVENUE_GENERATING_PRODUCT, metrics.top_revenue_generating_products),
    MetricDefinition(MetricType.TOP_SELLING_PRODUCT, metrics.top_selling_products),
    MetricDefinition(MetricType.TOTAL_PRODUCTS, metrics.total_products, OrderSource.PRODUCT_COUNT),
    # Order counts scope by the seller recorded on each line item
    MetricDefinition(MetricType.TOTAL_USERS, metrics.total_users, seller_scope=SellerScope.ITEM),
    MetricDefinition(
        MetricType.TOTAL_ORDERS_FULFILLED, metrics.total_orders_fulfilled, seller_scope=SellerScope.ITEM,
    ),
    MetricDefinition(
        MetricType.TOTAL_ORDERS_CANCELLED, metrics.total_orders_cancelled, seller_scope=SellerScope.ITEM,
    ),
    MetricDefinition(MetricType.FULFILLED_ORDERS, metrics.fulfilled_orders, seller_scope=SellerScope.ITEM),
    MetricDefinition(
        MetricType.PERCENTAGE_ORDERS_LOST, metrics.percentage_orders_lost,
        OrderSource.COMPARISON, SellerScope.ITEM,
    ),
    MetricDefinition(
        MetricType.PERCENTAGE_ORDERS_GAINED, metrics.percentage_orders_gained,
        OrderSource.COMPARISON, SellerScope.ITEM,
    ),
    MetricDefinition(MetricType.RECENT_ORDERS, metrics.recent_orders, OrderSource.RECENT, SellerScope.ITEM),
    MetricDefinition(MetricType.WEEKLY_ORDERS, metrics.weekly_orders, OrderSource.TRAILING_WEEK, SellerScope.ITEM),
)


def dispatch(metric_type: Union[MetricType, str]) -> MetricDefinition:
    """Look up the definition for ``metric_type``."""
    try:
        key = MetricType(metric_type)
    except ValueError:
        raise UnknownMetricType(metric_type) from None
    return DISPATCH_TABLE[key]
