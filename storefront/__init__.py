"""
Storefront & Order Flow

Catalog, checkout with Stripe hosted sessions, and webhook reconciliation of
order status. The HTTP routes live in ``storefront.api``.
"""

from .checkout import CheckoutConfig, CheckoutItem, CheckoutManager, CheckoutResult
from .config_store import EmailConfigCache, EmailSettings, get_active_payment_config, get_email_config_cache
from .models import EmailConfig, Order, OrderItem, OrderStatus, PaymentConfig, Product
from .stripe_client import StripeCheckoutSession, StripeClient, StripeError
from .webhook_handlers import CheckoutSessionHandler, TransitionOutcome
from .webhooks import WebhookEventType, WebhookProcessor, WebhookResult, WebhookStatus

__all__ = [
    # Models
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentConfig",
    "EmailConfig",
    # Configuration store
    "get_active_payment_config",
    "EmailConfigCache",
    "EmailSettings",
    "get_email_config_cache",
    # Stripe Integration
    "StripeClient",
    "StripeCheckoutSession",
    "StripeError",
    # Checkout Flow
    "CheckoutManager",
    "CheckoutItem",
    "CheckoutConfig",
    "CheckoutResult",
    # Webhook Processing
    "WebhookProcessor",
    "WebhookEventType",
    "WebhookStatus",
    "WebhookResult",
    "CheckoutSessionHandler",
    "TransitionOutcome",
]
