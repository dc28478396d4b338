"""Decoding of the ``orderedItems`` blob stored on each order.

Historical orders carry this payload either as a JSON array or as the same
array serialised into a string. Anything that does not decode to a list of
well-formed items is treated as an order without items.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from seller_analytics.repositories.base import OrderRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderedItem:
    product_id: str
    quantity: int
    seller_id: Optional[int] = None

    def to_dict(self) -> dict:
        data = {"productId": self.product_id, "quantity": self.quantity}
        if self.seller_id is not None:
            data["sellerId"] = self.seller_id
        return data


@dataclass(frozen=True)
class ExtractedOrder:
    """An order paired with its decoded items."""
    order: OrderRecord
    items: tuple[OrderedItem, ...]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _seller_id(value: Any) -> tuple[bool, Optional[int]]:
    """Return (valid, seller_id) for an optional ``sellerId`` field."""
    if value is None:
        return True, None
    if _is_int(value):
        return True, value
    if isinstance(value, float) and value.is_integer():
        return True, int(value)
    return False, None


def _to_item(entry: Any) -> Optional[OrderedItem]:
    if isinstance(entry, OrderedItem):
        return entry
    if not isinstance(entry, Mapping):
        return None

    product_id = entry.get("productId")
    quantity = entry.get("quantity")
    if not isinstance(product_id, str) or not _is_int(quantity) or quantity < 0:
        return None

    ok, seller_id = _seller_id(entry.get("sellerId"))
    if not ok:
        return None
    return OrderedItem(product_id=product_id, quantity=quantity, seller_id=seller_id)


def extract_ordered_items(raw: Any) -> tuple[OrderedItem, ...]:
    """Decode an ``orderedItems`` value into typed items.

    Returns an empty tuple when the value cannot be decoded or when any entry
    is malformed. Never raises.
    """
    if raw is None:
        return ()

    payload = raw
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning(f"Error decoding orderedItems: {e}")
            return ()
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Error parsing orderedItems: {e}")
            return ()

    if not isinstance(payload, (list, tuple)):
        logger.warning(f"Invalid type for orderedItems: {type(payload).__name__}")
        return ()

    items = []
    for entry in payload:
        item = _to_item(entry)
        if item is None:
            logger.warning(f"orderedItems contains an invalid entry: {entry!r}")
            return ()
        items.append(item)
    return tuple(items)


def extract_orders(orders: Iterable[OrderRecord]) -> list[ExtractedOrder]:
    return [ExtractedOrder(order=o, items=extract_ordered_items(o.ordered_items)) for o in orders]


def referenced_product_ids(orders: Iterable[ExtractedOrder]) -> set[str]:
    """Union of product ids referenced by the given orders."""
    ids: set[str] = set()
    for extracted in orders:
        ids.update(item.product_id for item in extracted.items)
    return ids


def has_seller_item(items: Sequence[OrderedItem], seller_id: int) -> bool:
    return any(item.seller_id == seller_id for item in items)
