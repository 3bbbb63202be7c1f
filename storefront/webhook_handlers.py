"""
Storefront Webhook Handlers

Handlers for individual Stripe event types. The checkout completion handler
moves an order from Pending to Confirmed with a single conditional UPDATE, so
concurrent or repeated deliveries of the same event confirm it at most once.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageUnavailableError

from .models import Order, OrderStatus

logger = logging.getLogger(__name__)


class TransitionOutcome(Enum):
    """Result of reconciling one completion event against the order store"""

    CONFIRMED = "confirmed"  # This delivery performed the Pending -> Confirmed transition
    ALREADY_PROCESSED = "already_processed"  # Order exists but is no longer Pending
    ORDER_NOT_FOUND = "order_not_found"  # No order carries this session id
    IGNORED = "ignored"  # Event carried nothing to reconcile


@dataclass
class HandlerResult:
    outcome: TransitionOutcome
    session_id: Optional[str] = None
    order_id: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.outcome == TransitionOutcome.CONFIRMED


class BaseWebhookHandler:
    """Base class for webhook event handlers"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory


class CheckoutSessionHandler(BaseWebhookHandler):
    """Handler for checkout session events"""

    def handle_session_completed(self, session_object: Dict[str, Any], event_id: Optional[str] = None) -> HandlerResult:
        """
        Confirm the order behind a completed checkout session

        Order-not-found and already-confirmed are successful no-ops. Only a
        storage failure raises (StorageUnavailableError), leaving redelivery
        to the processor.
        """
        session_id = session_object.get("id")
        if not session_id:
            logger.warning(f"Event {event_id} has no checkout session id, nothing to reconcile")
            return HandlerResult(outcome=TransitionOutcome.IGNORED)

        try:
            with self.session_factory() as db:
                result = db.execute(
                    update(Order)
                    .where(Order.stripe_session_id == session_id, Order.status == OrderStatus.PENDING)
                    .values(status=OrderStatus.CONFIRMED, confirmed_at=datetime.utcnow())
                    .execution_options(synchronize_session=False)
                )
                db.commit()

                # Fresh read: the id for the notifier, or which no-op this was
                existing = db.query(Order.id, Order.status).filter(Order.stripe_session_id == session_id).first()

        except SQLAlchemyError as e:
            logger.error(f"Storage error reconciling session {session_id} (event {event_id}): {e}")
            raise StorageUnavailableError(
                "Order store unavailable during reconciliation", operation="confirm_order", session_id=session_id
            )

        if result.rowcount == 1:
            order_id = existing.id if existing is not None else None
            logger.info(f"Order {order_id} confirmed via webhook (session {session_id})")
            return HandlerResult(outcome=TransitionOutcome.CONFIRMED, session_id=session_id, order_id=order_id)

        if existing is None:
            logger.info(f"No order for checkout session {session_id}, acknowledging")
            return HandlerResult(outcome=TransitionOutcome.ORDER_NOT_FOUND, session_id=session_id)

        logger.info(f"Order {existing.id} already {existing.status.value}, duplicate delivery ignored")
        return HandlerResult(
            outcome=TransitionOutcome.ALREADY_PROCESSED,
            session_id=session_id,
            order_id=existing.id,
        )
