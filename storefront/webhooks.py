"""
Storefront Webhooks

Stripe webhook processor: configuration gate, signature verification over the
raw body, event dispatch, and the acknowledgement contract.

Only the configuration gate and signature verification reject a delivery.
Every verified delivery is acknowledged, whether or not it changed an order,
so the processor does not keep retrying events that can never succeed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.orm import Session

from core.config import get_settings
from core.exceptions import InvalidSignatureError, NotConfiguredError
from core.metrics import metrics
from database.session import SessionLocal

from .config_store import get_active_payment_config
from .stripe_client import StripeClient
from .webhook_handlers import CheckoutSessionHandler, HandlerResult, TransitionOutcome

logger = logging.getLogger(__name__)


class WebhookEventType(Enum):
    """Stripe webhook event types we act on"""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class WebhookStatus(Enum):
    """Webhook processing status"""

    CONFIRMED = "confirmed"
    ALREADY_PROCESSED = "already_processed"
    ORDER_NOT_FOUND = "order_not_found"
    IGNORED = "ignored"


@dataclass
class WebhookResult:
    """Outcome of one verified delivery"""

    event_id: Optional[str]
    event_type: str
    status: WebhookStatus
    session_id: Optional[str] = None
    order_id: Optional[str] = None

    @property
    def order_confirmed(self) -> bool:
        """True only for the delivery that performed the transition"""
        return self.status == WebhookStatus.CONFIRMED

    def acknowledgement(self) -> dict:
        return {"received": True}


_OUTCOME_STATUS = {
    TransitionOutcome.CONFIRMED: WebhookStatus.CONFIRMED,
    TransitionOutcome.ALREADY_PROCESSED: WebhookStatus.ALREADY_PROCESSED,
    TransitionOutcome.ORDER_NOT_FOUND: WebhookStatus.ORDER_NOT_FOUND,
    TransitionOutcome.IGNORED: WebhookStatus.IGNORED,
}


class WebhookProcessor:
    """
    Main webhook processor for Stripe events

    The webhook secret is read from settings on each call unless one is passed
    explicitly, so a processor built at import time still sees the secret the
    operator configured.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        stripe_client: Optional[StripeClient] = None,
        webhook_secret: Optional[str] = None,
    ):
        self.session_factory = session_factory
        self.stripe_client = stripe_client or StripeClient(signature_tolerance=get_settings().stripe_webhook_tolerance)
        self._webhook_secret = webhook_secret
        self.checkout_handler = CheckoutSessionHandler(session_factory)

    @property
    def webhook_secret(self) -> Optional[str]:
        if self._webhook_secret is not None:
            return self._webhook_secret or None
        return get_settings().webhook_secret_value

    def check_configuration(self) -> str:
        """
        Configuration gate; returns the webhook secret

        Raises:
            NotConfiguredError: no stored payment config with a secret key, or
                no webhook secret in the environment
            StorageUnavailableError: the payment config could not be read
        """
        with self.session_factory() as db:
            get_active_payment_config(db)

        secret = self.webhook_secret
        if not secret:
            raise NotConfiguredError("Not configured", setting="stripe_webhook_secret")
        return secret

    def process_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookResult:
        """
        Verify and reconcile one webhook delivery

        ``payload`` is the raw request body. It is verified and parsed as-is.
        """
        try:
            secret = self.check_configuration()
        except NotConfiguredError:
            logger.warning("Webhook rejected: payment processing not configured")
            metrics.track_webhook_rejection("not_configured")
            raise

        try:
            event = self.stripe_client.construct_webhook_event(payload, signature, secret)
        except InvalidSignatureError as e:
            logger.warning(f"Webhook error: {e.message}")
            metrics.track_webhook_rejection(e.details.get("reason", "signature"))
            raise

        event_id = event["event_id"]
        event_type = event["event_type"]
        logger.info(f"Processing webhook event {event_id} of type {event_type}")

        if event_type == WebhookEventType.CHECKOUT_SESSION_COMPLETED.value:
            handled = self.checkout_handler.handle_session_completed(event["object"], event_id)
        else:
            logger.info(f"Unhandled event type: {event_type}, acknowledging")
            handled = HandlerResult(outcome=TransitionOutcome.IGNORED)

        result = WebhookResult(
            event_id=event_id,
            event_type=event_type,
            status=_OUTCOME_STATUS[handled.outcome],
            session_id=handled.session_id,
            order_id=handled.order_id,
        )

        metrics.track_webhook_event(event_type, result.status.value)
        if result.order_confirmed:
            metrics.track_order_confirmed()

        return result
