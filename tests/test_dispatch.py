"""Tests for the metric type registry."""

import pytest

from seller_analytics.services import metrics
from seller_analytics.services.dispatch import (
    DISPATCH_TABLE, MetricDefinition, MetricType, OrderSource, dispatch,
)
from seller_analytics.services.errors import UnknownMetricType
from seller_analytics.services.metrics import SellerScope


class TestTable:
    def test_every_type_registered(self):
        assert set(DISPATCH_TABLE) == set(MetricType)

    def test_fourteen_types(self):
        assert len(MetricType) == 14

    def test_immutable(self):
        with pytest.raises(TypeError):
            DISPATCH_TABLE[MetricType.TOTAL_REVENUE] = None

    def test_definitions_frozen(self):
        definition = DISPATCH_TABLE[MetricType.TOTAL_REVENUE]
        with pytest.raises(AttributeError):
            definition.source = OrderSource.RECENT

    def test_sources(self):
        assert DISPATCH_TABLE[MetricType.PERCENTAGE_ORDERS_LOST].source is OrderSource.COMPARISON
        assert DISPATCH_TABLE[MetricType.PERCENTAGE_ORDERS_GAINED].source is OrderSource.COMPARISON
        assert DISPATCH_TABLE[MetricType.RECENT_ORDERS].source is OrderSource.RECENT
        assert DISPATCH_TABLE[MetricType.WEEKLY_ORDERS].source is OrderSource.TRAILING_WEEK
        assert DISPATCH_TABLE[MetricType.TOTAL_PRODUCTS].source is OrderSource.PRODUCT_COUNT
        assert DISPATCH_TABLE[MetricType.MONTHLY_REVENUE].source is OrderSource.WINDOW

    def test_seller_scopes(self):
        assert DISPATCH_TABLE[MetricType.TOTAL_REVENUE].seller_scope is SellerScope.CATALOG
        assert DISPATCH_TABLE[MetricType.TOP_SELLING_PRODUCT].seller_scope is SellerScope.CATALOG
        assert DISPATCH_TABLE[MetricType.PERCENTAGE_ORDERS_LOST].seller_scope is SellerScope.ITEM
        assert DISPATCH_TABLE[MetricType.TOTAL_USERS].seller_scope is SellerScope.ITEM

    def test_needs_catalog(self):
        assert OrderSource.WINDOW.needs_catalog
        assert OrderSource.COMPARISON.needs_catalog
        assert OrderSource.RECENT.needs_catalog
        assert not OrderSource.TRAILING_WEEK.needs_catalog
        assert not OrderSource.PRODUCT_COUNT.needs_catalog


class TestDispatch:
    def test_by_string(self):
        definition = dispatch("totalRevenue")
        assert isinstance(definition, MetricDefinition)
        assert definition.compute is metrics.total_revenue

    def test_by_enum(self):
        assert dispatch(MetricType.TOP_SELLING_PRODUCT).compute is metrics.top_selling_products

    @pytest.mark.parametrize("value", ["TotalRevenue", "revenue", "", None, 3])
    def test_unknown(self, value):
        with pytest.raises(UnknownMetricType) as exc:
            dispatch(value)
        assert exc.value.value == value
