"""Order and product tables read by the analytics engine."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, Numeric, String

from seller_analytics.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class Product(Base):
    """Catalog product owned by a seller."""
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    name = Column(String(500), default="")
    price = Column(Numeric(12, 2), nullable=False, default=0)
    seller_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Order(Base):
    """Customer order. ``ordered_items`` holds [{productId, quantity, sellerId?}]."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True, index=True)
    ordered_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    ordered_items = Column(JSON, default=list)
    ordering_status = Column(String(50), default="Pending")
    order_fulfillment_status = Column(String(50), default="Unfulfilled")
