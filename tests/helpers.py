"""
Test helpers for building signed Stripe webhook deliveries
"""
import hashlib
import hmac
import json
import time
from typing import Optional

TEST_WEBHOOK_SECRET = "whsec_test_secret"


def sign_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header value for the given raw body"""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def stripe_event(session_id: str, event_id: str = "evt_test_1", event_type: str = "checkout.session.completed") -> bytes:
    """Raw body of a Stripe event wrapping a checkout session"""
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "created": int(time.time()),
            "livemode": False,
            "data": {"object": {"id": session_id, "object": "checkout.session", "payment_status": "paid"}},
        }
    ).encode("utf-8")
