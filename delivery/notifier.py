"""
Order notifier

Fire-and-forget confirmation email for newly confirmed orders. Runs after the
webhook response has been sent; nothing it does can affect the order status or
the acknowledgement, so every failure ends here as a log line and a metric.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session, selectinload

from core.config import get_settings
from core.exceptions import EmailDeliveryError
from core.metrics import metrics
from database.session import SessionLocal
from storefront.config_store import EmailConfigCache
from storefront.models import Order

from .email_builder import build_order_confirmation_email
from .smtp_client import SmtpEmailSender

logger = logging.getLogger(__name__)

TEMPLATE_ORDER_CONFIRMATION = "order_confirmation"


class OrderNotifier:
    """Sends the seller a confirmation email for a confirmed order"""

    def __init__(
        self,
        email_config_cache: EmailConfigCache,
        sender: Optional[SmtpEmailSender] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        enabled: Optional[bool] = None,
    ):
        self.email_config_cache = email_config_cache
        self.sender = sender or SmtpEmailSender.from_settings()
        self.session_factory = session_factory
        self.enabled = get_settings().enable_emails if enabled is None else enabled

    def send_order_confirmation(self, order_id: str) -> bool:
        """Best-effort send; returns True when the message was handed to SMTP"""
        try:
            sent = self._send_order_confirmation(order_id)
        except EmailDeliveryError as e:
            logger.error(f"Order {order_id} confirmation email failed: {e.message}")
            metrics.track_email_sent(TEMPLATE_ORDER_CONFIRMATION, "failed")
            return False
        except Exception:
            logger.exception(f"Unexpected error sending confirmation for order {order_id}")
            metrics.track_email_sent(TEMPLATE_ORDER_CONFIRMATION, "error")
            return False

        metrics.track_email_sent(TEMPLATE_ORDER_CONFIRMATION, "success" if sent else "skipped")
        return sent

    def _send_order_confirmation(self, order_id: str) -> bool:
        if not self.enabled:
            logger.info(f"Emails disabled, skipping confirmation for order {order_id}")
            return False

        email_settings = self.email_config_cache.get()
        if not email_settings.is_complete:
            logger.warning(
                f"Email config incomplete (source={email_settings.source}), skipping confirmation for order {order_id}"
            )
            return False

        with self.session_factory() as db:
            order = db.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
            if order is None:
                logger.warning(f"Order {order_id} not found, no confirmation sent")
                return False

            email = build_order_confirmation_email(
                order, sender=email_settings.email_user, recipient=email_settings.seller_email
            )

        response = self.sender.send_email(email, email_settings.email_user, email_settings.email_pass)
        if not response.success:
            raise EmailDeliveryError(
                "SMTP delivery failed", email=email.to_email, reason=response.error_message, order_id=order_id
            )

        logger.info(f"Confirmation for order {order_id} sent to {email.to_email}")
        return True
