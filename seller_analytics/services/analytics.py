"""Seller and admin analytics.

``AnalyticsService`` is the single entry point: it resolves the reporting
window, picks the metric computer, loads the orders that computer needs,
joins the referenced products once and returns ``{"data": payload}``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from seller_analytics.config import Settings, get_settings
from seller_analytics.repositories.base import AnalyticsDataSource, OrderCriteria, OrderRecord
from seller_analytics.schemas import AnalyticsQuery
from seller_analytics.services.catalog import ProductCatalog, join_catalog
from seller_analytics.services.date_range import DateRange, as_utc, resolve_date_range, utcnow
from seller_analytics.services.dispatch import MetricDefinition, OrderSource, dispatch
from seller_analytics.services.metrics import MetricInput, SellerScope
from seller_analytics.services.order_items import extract_orders, referenced_product_ids

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Computes one metric per call. Holds no state between calls."""

    def __init__(
        self,
        source: AnalyticsDataSource,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.source = source
        self.settings = settings or get_settings()
        self.clock = clock

    async def compute(self, query: AnalyticsQuery) -> dict[str, Any]:
        now = as_utc(self.clock())
        date_range = resolve_date_range(
            query.start_month_year,
            query.end_month_year,
            now=now,
            lookback_months=self.settings.analytics_lookback_months,
        )
        definition = dispatch(query.type)

        logger.debug(
            f"Computing {definition.metric_type.value} for "
            f"{date_range.start.isoformat()}..{date_range.end.isoformat()}"
            + (f" seller={query.seller_id}" if query.seller_id is not None else "")
        )
        metric_input = await self._load(definition, date_range, query.seller_id, now)
        return {"data": definition.compute(metric_input)}

    async def _load(
        self,
        definition: MetricDefinition,
        date_range: DateRange,
        seller_id: Optional[int],
        now: datetime,
    ) -> MetricInput:
        source = definition.source

        if not source.needs_catalog:
            count = await self._count(source, seller_id, now)
            return self._input(definition, date_range, seller_id, count=count)

        # Item-scoped metrics can let the data source drop other sellers' orders
        order_seller = seller_id if definition.seller_scope is SellerScope.ITEM else None
        previous: Sequence[OrderRecord] = ()

        if source is OrderSource.COMPARISON:
            current, previous = await asyncio.gather(
                self.source.find_orders(date_range, order_seller),
                self.source.find_orders(date_range.shifted(-1), order_seller),
            )
        elif source is OrderSource.RECENT:
            current = await self.source.find_recent_orders(
                self.settings.analytics_recent_orders_limit, order_seller,
            )
        else:
            current = await self.source.find_orders(date_range, order_seller)

        orders = extract_orders(current)
        previous_orders = extract_orders(previous)
        catalog = await join_catalog(
            self.source,
            referenced_product_ids(orders) | referenced_product_ids(previous_orders),
        )
        return self._input(
            definition, date_range, seller_id,
            orders=orders, previous_orders=previous_orders, catalog=catalog,
        )

    async def _count(self, source: OrderSource, seller_id: Optional[int], now: datetime) -> int:
        if source is OrderSource.PRODUCT_COUNT:
            return await self.source.count_products(seller_id)
        criteria = OrderCriteria(
            start=now - timedelta(days=self.settings.analytics_weekly_window_days),
            end=now,
            seller_id=seller_id,
        )
        return await self.source.count_orders(criteria)

    def _input(
        self,
        definition: MetricDefinition,
        date_range: DateRange,
        seller_id: Optional[int],
        orders=(),
        previous_orders=(),
        catalog: Optional[ProductCatalog] = None,
        count: int = 0,
    ) -> MetricInput:
        return MetricInput(
            orders=orders,
            catalog=catalog if catalog is not None else ProductCatalog(),
            date_range=date_range,
            seller_id=seller_id,
            seller_scope=definition.seller_scope,
            previous_orders=previous_orders,
            count=count,
            top_n=self.settings.analytics_top_n,
        )
