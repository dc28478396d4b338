"""Batched product lookup for the products referenced by an order window."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional

from seller_analytics.repositories.base import AnalyticsDataSource, ProductRecord

logger = logging.getLogger(__name__)


class ProductCatalog:
    """Price and ownership lookup over a fixed set of products."""

    def __init__(self, products: Iterable[ProductRecord] = ()):
        self._products: dict[str, ProductRecord] = {p.id: p for p in products}

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def __len__(self) -> int:
        return len(self._products)

    def knows(self, product_id: str) -> bool:
        return product_id in self._products

    def price_of(self, product_id: str) -> Optional[Decimal]:
        product = self._products.get(product_id)
        if product is None or product.price is None:
            return None
        return Decimal(str(product.price))

    def belongs_to_seller(self, product_id: str, seller_id: int) -> bool:
        product = self._products.get(product_id)
        return product is not None and product.seller_id == seller_id


async def join_catalog(source: AnalyticsDataSource, product_ids: Iterable[str]) -> ProductCatalog:
    """Resolve all ``product_ids`` with one ``find_products_by_ids`` call."""
    ids = sorted(set(product_ids))
    if not ids:
        return ProductCatalog()

    products = await source.find_products_by_ids(ids)
    catalog = ProductCatalog(products)
    missing = len(ids) - len(catalog)
    if missing:
        logger.debug(f"{missing} referenced product(s) not found in catalog")
    return catalog
