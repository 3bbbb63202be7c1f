"""
Storefront Models

Catalog, order tracking and stored processor/email configuration.
"""

import enum

from sqlalchemy import TIMESTAMP, Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.base import Base, DatabaseAgnosticEnum, generate_uuid


class OrderStatus(str, enum.Enum):
    """Order lifecycle status"""

    PENDING = "Pending"  # Checkout session opened, payment not confirmed
    CONFIRMED = "Confirmed"  # Payment confirmed by the processor webhook
    CANCELLED = "Cancelled"  # Checkout could not be opened or was abandoned


class Product(Base):
    """Catalog entry"""

    __tablename__ = "products"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    price_cents = Column(Integer, nullable=False)
    currency = Column(String(3), default="gbp", nullable=False)
    image_url = Column(String(500))
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (CheckConstraint("price_cents >= 0", name="check_product_price_non_negative"),)

    @property
    def price(self) -> float:
        return self.price_cents / 100.0

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, price_cents={self.price_cents})>"


class Order(Base):
    """
    Customer order

    One order per checkout session. The status only moves forward:
    Pending -> Confirmed through the payment webhook, Pending -> Cancelled
    when checkout cannot be opened.
    """

    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=generate_uuid)
    stripe_session_id = Column(String(255), unique=True, index=True, nullable=True)

    status = Column(DatabaseAgnosticEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)

    customer_email = Column(String(255), nullable=False, index=True)
    total_cents = Column(Integer, nullable=False)
    currency = Column(String(3), default="gbp", nullable=False)

    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now(), nullable=False)
    confirmed_at = Column(TIMESTAMP)
    cancelled_at = Column(TIMESTAMP)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="check_order_total_non_negative"),
        Index("idx_orders_status_created", "status", "created_at"),
    )

    @property
    def total(self) -> float:
        return self.total_cents / 100.0

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    @property
    def is_confirmed(self) -> bool:
        return self.status == OrderStatus.CONFIRMED

    def __repr__(self):
        return f"<Order(id={self.id}, session={self.stripe_session_id}, status={self.status})>"


class OrderItem(Base):
    """Line item snapshot taken when the order is created"""

    __tablename__ = "order_items"

    id = Column(String, primary_key=True, default=generate_uuid)
    order_id = Column(String, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    product_name = Column(String(255), nullable=False)
    unit_price_cents = Column(Integer, nullable=False)
    quantity = Column(Integer, default=1, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_order_item_quantity_positive"),
        CheckConstraint("unit_price_cents >= 0", name="check_order_item_price_non_negative"),
    )

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


class PaymentConfig(Base):
    """Stored Stripe credentials; a single active record is expected"""

    __tablename__ = "payment_config"

    id = Column(String, primary_key=True, default=generate_uuid)
    stripe_publishable_key = Column(String(255))
    stripe_secret_key = Column(String(255))
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def is_test_mode(self) -> bool:
        return bool(self.stripe_secret_key) and self.stripe_secret_key.startswith("sk_test_")

    def __repr__(self):
        return f"<PaymentConfig(id={self.id}, test_mode={self.is_test_mode})>"


class EmailConfig(Base):
    """Stored sender credentials and the seller notification address"""

    __tablename__ = "email_config"

    id = Column(String, primary_key=True, default=generate_uuid)
    email_user = Column(String(255))
    email_pass = Column(String(255))
    seller_email = Column(String(255))

    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now(), nullable=False)
