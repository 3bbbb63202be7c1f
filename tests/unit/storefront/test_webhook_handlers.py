"""
Tests for the checkout session completion handler
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from storefront.models import Order, OrderStatus
from storefront.webhook_handlers import CheckoutSessionHandler, TransitionOutcome

pytestmark = pytest.mark.unit

DELIVERY_WORKERS = 8


@pytest.fixture
def handler(session_factory):
    return CheckoutSessionHandler(session_factory)


class TestHandleSessionCompleted:
    def test_confirms_pending_order(self, handler, make_order, db_session):
        order = make_order(session_id="cs_test_1")

        result = handler.handle_session_completed({"id": "cs_test_1"}, "evt_1")

        assert result.outcome == TransitionOutcome.CONFIRMED
        assert result.confirmed is True
        assert result.order_id == order.id

        db_session.expire_all()
        assert db_session.get(Order, order.id).status == OrderStatus.CONFIRMED

    def test_second_call_is_already_processed(self, handler, make_order):
        make_order(session_id="cs_test_1")

        handler.handle_session_completed({"id": "cs_test_1"})
        result = handler.handle_session_completed({"id": "cs_test_1"})

        assert result.outcome == TransitionOutcome.ALREADY_PROCESSED
        assert result.confirmed is False

    def test_concurrent_deliveries_confirm_once(self, file_session_factory):
        with file_session_factory() as db:
            order = Order(stripe_session_id="cs_test_1", customer_email="buyer@example.com", total_cents=18900)
            db.add(order)
            db.commit()
            order_id = order.id

        barrier = threading.Barrier(DELIVERY_WORKERS)

        def deliver():
            handler = CheckoutSessionHandler(file_session_factory)
            barrier.wait(timeout=10)
            return handler.handle_session_completed({"id": "cs_test_1"}).outcome

        with ThreadPoolExecutor(max_workers=DELIVERY_WORKERS) as pool:
            outcomes = list(pool.map(lambda _: deliver(), range(DELIVERY_WORKERS)))

        assert outcomes.count(TransitionOutcome.CONFIRMED) == 1
        assert outcomes.count(TransitionOutcome.ALREADY_PROCESSED) == DELIVERY_WORKERS - 1

        with file_session_factory() as db:
            assert db.get(Order, order_id).status == OrderStatus.CONFIRMED

    def test_missing_order(self, handler):
        result = handler.handle_session_completed({"id": "cs_missing"})

        assert result.outcome == TransitionOutcome.ORDER_NOT_FOUND
        assert result.order_id is None

    def test_event_without_session_id(self, handler):
        assert handler.handle_session_completed({}).outcome == TransitionOutcome.IGNORED
