"""
Storefront Stripe Client

Thin wrapper over the Stripe SDK for hosted checkout sessions and webhook
event verification. Credentials are passed per call (``api_key=``) so the
stored payment config is the single source of the secret key; the SDK's
module-level ``stripe.api_key`` is never set.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import stripe

from core.exceptions import InvalidSignatureError

logger = logging.getLogger(__name__)

DEFAULT_SIGNATURE_TOLERANCE = 300


class StripeError(Exception):
    """Custom exception for Stripe-related errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        error_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.error_type = error_type


@dataclass
class StripeCheckoutSession:
    """Parameters for a hosted checkout session"""

    line_items: List[Dict[str, Any]]
    success_url: str
    cancel_url: str
    customer_email: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    client_reference_id: Optional[str] = None
    mode: str = "payment"
    payment_method_types: List[str] = field(default_factory=lambda: ["card"])
    expires_after_minutes: int = 30

    def to_stripe_params(self) -> Dict[str, Any]:
        """Convert to Stripe API parameters"""
        params = {
            "line_items": self.line_items,
            "mode": self.mode,
            "payment_method_types": self.payment_method_types,
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "expires_at": int((datetime.utcnow() + timedelta(minutes=self.expires_after_minutes)).timestamp()),
            "metadata": self.metadata,
        }

        if self.customer_email:
            params["customer_email"] = self.customer_email
        if self.client_reference_id:
            params["client_reference_id"] = self.client_reference_id

        return params


class StripeClient:
    """Stripe SDK calls used by checkout and the webhook reconciler"""

    def __init__(self, signature_tolerance: int = DEFAULT_SIGNATURE_TOLERANCE):
        self.signature_tolerance = signature_tolerance

    def create_checkout_session(self, api_key: str, session_config: StripeCheckoutSession) -> Dict[str, Any]:
        """Create a hosted checkout session and return its id and redirect URL"""
        params = session_config.to_stripe_params()

        try:
            session = stripe.checkout.Session.create(api_key=api_key, **params)
        except stripe.StripeError as e:
            logger.error(f"Error creating checkout session: {e}")
            raise StripeError(
                f"Failed to create checkout session: {e.user_message or str(e)}",
                error_code=getattr(e, "code", None),
                error_type=type(e).__name__,
            )

        logger.info(f"Created checkout session: {session.id}")

        return {
            "session_id": session.id,
            "session_url": session.url,
            "expires_at": getattr(session, "expires_at", None),
        }

    def construct_webhook_event(self, payload: bytes, signature: Optional[str], webhook_secret: str) -> Dict[str, Any]:
        """
        Verify the signature over the raw payload and parse the event

        The payload must be the exact bytes received. The signature covers them
        verbatim, so the buffer is never rebuilt from a parsed object.

        Raises:
            InvalidSignatureError: missing/malformed header, bad signature,
                stale timestamp, or a payload that is not a valid event
        """
        if not signature:
            raise InvalidSignatureError("Unable to extract timestamp and signatures from header", "missing")

        try:
            # Same check stripe.Webhook.construct_event performs, but the parsed
            # event stays a plain dict built from the very bytes that were verified
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"), signature, webhook_secret, self.signature_tolerance
            )
            event = json.loads(payload)
        except stripe.SignatureVerificationError as e:
            raise InvalidSignatureError(str(e), "signature")
        except ValueError as e:
            raise InvalidSignatureError(f"Invalid payload: {e}", "payload")

        if not isinstance(event, dict) or not event.get("type"):
            raise InvalidSignatureError("Invalid payload: not a Stripe event", "payload")

        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise InvalidSignatureError("Invalid payload: event data is not an object", "payload")

        event_object = data.get("object") or {}
        if not isinstance(event_object, dict):
            raise InvalidSignatureError("Invalid payload: event data.object is not an object", "payload")

        return {
            "event_id": event.get("id"),
            "event_type": event["type"],
            "object": event_object,
            "created": event.get("created"),
            "livemode": event.get("livemode"),
        }


# Utility functions for common operations
def create_one_time_line_item(
    product_name: str, amount_cents: int, quantity: int = 1, currency: str = "gbp"
) -> Dict[str, Any]:
    """Create a one-time payment line item"""
    return {
        "price_data": {
            "currency": currency,
            "product_data": {"name": product_name},
            "unit_amount": amount_cents,
        },
        "quantity": quantity,
    }
