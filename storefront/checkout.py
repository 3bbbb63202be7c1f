"""
Storefront Checkout

Checkout flow: persist a Pending order, open a Stripe hosted checkout session
for it, then record the session id on the order so the webhook reconciler can
find it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from core.exceptions import CheckoutError, NotFoundError, StorageUnavailableError, ValidationError
from core.metrics import metrics

from .config_store import get_active_payment_config
from .models import Order, OrderItem, OrderStatus, Product
from .stripe_client import StripeCheckoutSession, StripeClient, StripeError, create_one_time_line_item

logger = logging.getLogger(__name__)


class CheckoutConfig:
    """Configuration for checkout flow"""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        currency: str = "gbp",
        session_expires_minutes: int = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.session_expires_minutes = session_expires_minutes

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CheckoutConfig":
        settings = settings or get_settings()
        return cls(base_url=settings.base_url, currency=settings.currency)

    def build_success_url(self) -> str:
        """Stripe substitutes the session id into the placeholder"""
        return f"{self.base_url}/api/v1/checkout/success?session_id={{CHECKOUT_SESSION_ID}}"

    def build_cancel_url(self, order_id: str) -> str:
        return f"{self.base_url}/cart?cancelled_order={order_id}"


@dataclass
class CheckoutItem:
    """Requested product and quantity"""

    product_id: str
    quantity: int = 1


@dataclass
class CheckoutResult:
    order_id: str
    session_id: str
    checkout_url: str
    total_cents: int
    currency: str


class CheckoutManager:
    """
    High-level checkout flow manager that coordinates database operations with Stripe
    """

    def __init__(
        self,
        config: Optional[CheckoutConfig] = None,
        stripe_client: Optional[StripeClient] = None,
    ):
        self.config = config or CheckoutConfig.from_settings()
        self.stripe_client = stripe_client or StripeClient()

    def initiate_checkout(self, db: Session, customer_email: str, items: List[CheckoutItem]) -> CheckoutResult:
        """
        Initiate complete checkout flow

        Raises:
            ValidationError: empty cart, bad quantity, unknown or inactive product
            NotConfiguredError: no stored payment config
            CheckoutError: Stripe refused the session; the order is cancelled
            StorageUnavailableError: the order could not be persisted
        """
        if not items:
            raise ValidationError("At least one item is required for checkout", field="items")
        if not customer_email:
            raise ValidationError("Customer email is required", field="customer_email")

        payment_config = get_active_payment_config(db)
        order = self._create_pending_order(db, customer_email, items)

        session_config = StripeCheckoutSession(
            line_items=[
                create_one_time_line_item(
                    product_name=item.product_name,
                    amount_cents=item.unit_price_cents,
                    quantity=item.quantity,
                    currency=order.currency,
                )
                for item in order.items
            ],
            success_url=self.config.build_success_url(),
            cancel_url=self.config.build_cancel_url(order.id),
            customer_email=customer_email,
            metadata={"order_id": order.id},
            client_reference_id=order.id,
            expires_after_minutes=self.config.session_expires_minutes,
        )

        try:
            stripe_result = self.stripe_client.create_checkout_session(payment_config.stripe_secret_key, session_config)
        except StripeError as e:
            logger.error(f"Stripe error creating session for order {order.id}: {e}")
            self._cancel_order(db, order)
            raise CheckoutError(str(e), order_id=order.id, stripe_error_code=e.error_code)

        try:
            order.stripe_session_id = stripe_result["session_id"]
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record session {stripe_result['session_id']} on order {order.id}: {e}")
            raise StorageUnavailableError("Order could not be updated", operation="attach_session", order_id=order.id)

        logger.info(f"Checkout started for order {order.id}, session {order.stripe_session_id}")

        return CheckoutResult(
            order_id=order.id,
            session_id=order.stripe_session_id,
            checkout_url=stripe_result["session_url"],
            total_cents=order.total_cents,
            currency=order.currency,
        )

    def get_order_for_session(self, db: Session, session_id: str) -> Order:
        """Fresh read of the order behind a checkout session"""
        order = db.query(Order).filter(Order.stripe_session_id == session_id).first()
        if order is None:
            raise NotFoundError("Order", session_id)
        return order

    def _create_pending_order(self, db: Session, customer_email: str, items: List[CheckoutItem]) -> Order:
        products = self._load_products(db, items)

        order = Order(
            customer_email=customer_email,
            status=OrderStatus.PENDING,
            currency=self.config.currency,
            total_cents=0,
        )
        for item in items:
            product = products[item.product_id]
            order.items.append(
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    unit_price_cents=product.price_cents,
                    quantity=item.quantity,
                )
            )
        order.total_cents = sum(line.line_total_cents for line in order.items)

        try:
            db.add(order)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist pending order for {customer_email}: {e}")
            raise StorageUnavailableError("Order could not be created", operation="create_order")

        metrics.track_order_created(order.currency)
        logger.info(f"Created pending order {order.id} ({order.total_cents} {order.currency})")
        return order

    def _load_products(self, db: Session, items: List[CheckoutItem]) -> Dict[str, Product]:
        for item in items:
            if item.quantity < 1:
                raise ValidationError("Quantity must be at least 1", field="quantity", product_id=item.product_id)

        ids = {item.product_id for item in items}
        try:
            products = {p.id: p for p in db.query(Product).filter(Product.id.in_(ids), Product.active.is_(True)).all()}
        except SQLAlchemyError as e:
            logger.error(f"Failed to load products for checkout: {e}")
            raise StorageUnavailableError("Products could not be loaded", operation="load_products")

        missing = sorted(ids - products.keys())
        if missing:
            raise ValidationError(f"Unknown product: {missing[0]}", field="items", product_ids=missing)

        for product in products.values():
            if product.currency != self.config.currency:
                raise ValidationError(
                    f"Product {product.id} is priced in {product.currency}, store currency is {self.config.currency}",
                    field="items",
                )

        return products

    def _cancel_order(self, db: Session, order: Order) -> None:
        try:
            order.status = OrderStatus.CANCELLED
            order.cancelled_at = datetime.utcnow()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to cancel order {order.id} after checkout error: {e}")
