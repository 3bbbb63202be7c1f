"""
Test Storefront API

Tests for the catalog, checkout and webhook endpoints with validation, error
handling, and notification scheduling.
"""

from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.errors import register_exception_handlers
from core.exceptions import CheckoutError, NotConfiguredError, StorageUnavailableError
from database.session import get_db
from storefront.api import (
    catalog_router,
    get_checkout_manager,
    get_order_notifier,
    get_webhook_processor,
    router,
    webhook_router,
)
from storefront.catalog import seed_products
from storefront.checkout import CheckoutConfig, CheckoutManager, CheckoutResult
from storefront.models import Order, OrderStatus
from storefront.webhooks import WebhookProcessor, WebhookResult, WebhookStatus
from tests.helpers import TEST_WEBHOOK_SECRET, sign_payload, stripe_event

pytestmark = pytest.mark.unit

# Test app setup
app = FastAPI()
app.include_router(router)
app.include_router(catalog_router)
app.include_router(webhook_router)
register_exception_handlers(app)

client = TestClient(app, raise_server_exceptions=False)


@pytest.fixture(autouse=True)
def override_db(session_factory):
    """Route every request to the per-test database and clear overrides afterwards"""

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_checkout_manager():
    """Fixture providing a mock checkout manager."""
    mock_manager = Mock()
    app.dependency_overrides[get_checkout_manager] = lambda: mock_manager
    return mock_manager


@pytest.fixture
def checkout_manager():
    manager = CheckoutManager(config=CheckoutConfig(base_url="http://shop.test"), stripe_client=Mock())
    app.dependency_overrides[get_checkout_manager] = lambda: manager
    return manager


@pytest.fixture
def webhook_processor(session_factory):
    processor = WebhookProcessor(session_factory=session_factory, webhook_secret=TEST_WEBHOOK_SECRET)
    app.dependency_overrides[get_webhook_processor] = lambda: processor
    return processor


@pytest.fixture
def mock_notifier():
    notifier = Mock()
    app.dependency_overrides[get_order_notifier] = lambda: notifier
    return notifier


def post_webhook(payload: bytes, signature: str = None):
    headers = {"Content-Type": "application/json"}
    if signature is not False:
        headers["Stripe-Signature"] = signature or sign_payload(payload)
    return client.post("/webhook", content=payload, headers=headers)


class TestCatalogAPI:
    def test_list_products(self, db_session):
        seed_products(db_session)

        response = client.get("/api/v1/products")

        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data] == ["Chelsea Leather Boots", "Oxford Brogues"]
        assert data[0]["price_cents"] == 18900
        assert data[0]["currency"] == "gbp"

    def test_empty_catalog(self):
        response = client.get("/api/v1/products")

        assert response.status_code == 200
        assert response.json() == []


class TestCheckoutInitiationAPI:
    def test_initiate_checkout_success(self, mock_checkout_manager):
        mock_checkout_manager.initiate_checkout.return_value = CheckoutResult(
            order_id="order_1",
            session_id="cs_test_1",
            checkout_url="https://checkout.stripe.com/c/pay/cs_test_1",
            total_cents=18900,
            currency="gbp",
        )

        response = client.post(
            "/api/v1/checkout/initiate",
            json={"customer_email": "buyer@example.com", "items": [{"product_id": "p1", "quantity": 1}]},
        )

        assert response.status_code == 201
        assert response.json() == {
            "order_id": "order_1",
            "session_id": "cs_test_1",
            "checkout_url": "https://checkout.stripe.com/c/pay/cs_test_1",
            "total_cents": 18900,
            "currency": "gbp",
        }
        _, email, items = mock_checkout_manager.initiate_checkout.call_args.args
        assert email == "buyer@example.com"
        assert items[0].product_id == "p1"

    def test_invalid_email(self, mock_checkout_manager):
        response = client.post(
            "/api/v1/checkout/initiate",
            json={"customer_email": "not-an-email", "items": [{"product_id": "p1"}]},
        )

        assert response.status_code == 422
        mock_checkout_manager.initiate_checkout.assert_not_called()

    def test_empty_items(self, mock_checkout_manager):
        response = client.post("/api/v1/checkout/initiate", json={"customer_email": "buyer@example.com", "items": []})

        assert response.status_code == 422

    def test_duplicate_products(self, mock_checkout_manager):
        response = client.post(
            "/api/v1/checkout/initiate",
            json={"customer_email": "buyer@example.com", "items": [{"product_id": "p1"}, {"product_id": "p1"}]},
        )

        assert response.status_code == 422

    def test_not_configured(self, mock_checkout_manager):
        mock_checkout_manager.initiate_checkout.side_effect = NotConfiguredError(
            "Payment processor is not configured", setting="stripe_secret_key"
        )

        response = client.post(
            "/api/v1/checkout/initiate",
            json={"customer_email": "buyer@example.com", "items": [{"product_id": "p1"}]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "NOT_CONFIGURED"

    def test_stripe_failure(self, mock_checkout_manager):
        mock_checkout_manager.initiate_checkout.side_effect = CheckoutError("declined", order_id="order_1")

        response = client.post(
            "/api/v1/checkout/initiate",
            json={"customer_email": "buyer@example.com", "items": [{"product_id": "p1"}]},
        )

        assert response.status_code == 502
        assert response.json()["details"]["order_id"] == "order_1"

    def test_unexpected_error(self, mock_checkout_manager):
        mock_checkout_manager.initiate_checkout.side_effect = RuntimeError("boom")

        response = client.post(
            "/api/v1/checkout/initiate",
            json={"customer_email": "buyer@example.com", "items": [{"product_id": "p1"}]},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"}


class TestSuccessPageAPI:
    def test_pending_order(self, checkout_manager, make_order):
        order = make_order(session_id="cs_test_1")

        response = client.get("/api/v1/checkout/success", params={"session_id": "cs_test_1"})

        assert response.status_code == 200
        data = response.json()
        assert data["order_id"] == order.id
        assert data["status"] == "Pending"
        assert data["confirmed_at"] is None

    def test_confirmed_order(self, checkout_manager, make_order):
        make_order(session_id="cs_test_1", status=OrderStatus.CONFIRMED)

        response = client.get("/api/v1/checkout/success", params={"session_id": "cs_test_1"})

        assert response.json()["status"] == "Confirmed"

    def test_unknown_session(self, checkout_manager):
        response = client.get("/api/v1/checkout/success", params={"session_id": "cs_missing"})

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_session_id_required(self, checkout_manager):
        assert client.get("/api/v1/checkout/success").status_code == 422


class TestWebhookAPI:
    def test_confirms_order_and_notifies_once(self, webhook_processor, mock_notifier, payment_config, make_order, db_session):
        order = make_order(session_id="cs_test_1")
        payload = stripe_event("cs_test_1")

        first = post_webhook(payload)
        second = post_webhook(payload)

        assert first.status_code == 200
        assert first.json() == {"received": True}
        assert second.status_code == 200
        assert second.json() == {"received": True}

        mock_notifier.send_order_confirmation.assert_called_once_with(order.id)

        db_session.expire_all()
        assert db_session.get(Order, order.id).status == OrderStatus.CONFIRMED

    def test_invalid_signature(self, webhook_processor, mock_notifier, payment_config, make_order, db_session):
        order = make_order(session_id="cs_test_1")
        payload = stripe_event("cs_test_1")

        response = post_webhook(payload, sign_payload(payload, secret="whsec_forged"))

        assert response.status_code == 400
        assert response.text.startswith("Error: ")
        mock_notifier.send_order_confirmation.assert_not_called()

        db_session.expire_all()
        assert db_session.get(Order, order.id).status == OrderStatus.PENDING

    def test_missing_signature_header(self, webhook_processor, mock_notifier, payment_config):
        response = post_webhook(stripe_event("cs_test_1"), signature=False)

        assert response.status_code == 400
        assert response.text.startswith("Error: ")

    def test_signed_event_with_non_object_session(self, webhook_processor, mock_notifier, payment_config):
        payload = b'{"type":"checkout.session.completed","data":{"object":"cs_test_1"}}'

        response = post_webhook(payload)

        assert response.status_code == 400
        assert response.text.startswith("Error: Invalid payload")
        mock_notifier.send_order_confirmation.assert_not_called()

    def test_not_configured(self, webhook_processor, mock_notifier, make_order):
        make_order(session_id="cs_test_1")

        response = post_webhook(stripe_event("cs_test_1"))

        assert response.status_code == 400
        assert response.text == "Not configured"
        mock_notifier.send_order_confirmation.assert_not_called()

    def test_other_event_acknowledged(self, webhook_processor, mock_notifier, payment_config, make_order):
        make_order(session_id="cs_test_1")

        response = post_webhook(stripe_event("cs_test_1", event_type="charge.refunded"))

        assert response.status_code == 200
        assert response.json() == {"received": True}
        mock_notifier.send_order_confirmation.assert_not_called()

    def test_unknown_order_acknowledged(self, webhook_processor, mock_notifier, payment_config):
        response = post_webhook(stripe_event("cs_nobody"))

        assert response.status_code == 200
        assert response.json() == {"received": True}
        mock_notifier.send_order_confirmation.assert_not_called()

    def test_storage_unavailable(self, mock_notifier):
        processor = Mock()
        processor.process_webhook.side_effect = StorageUnavailableError("db down", operation="confirm_order")
        app.dependency_overrides[get_webhook_processor] = lambda: processor

        response = post_webhook(stripe_event("cs_test_1"))

        assert response.status_code == 503
        mock_notifier.send_order_confirmation.assert_not_called()

    def test_raw_body_passed_through(self, mock_notifier):
        processor = Mock()
        processor.process_webhook.return_value = WebhookResult(
            event_id="evt_1", event_type="checkout.session.completed", status=WebhookStatus.IGNORED
        )
        app.dependency_overrides[get_webhook_processor] = lambda: processor
        payload = b'{"id":"evt_1",  "type":"checkout.session.completed"}'

        post_webhook(payload, "t=1,v1=abc")

        processor.process_webhook.assert_called_once_with(payload, "t=1,v1=abc")
