"""
Storefront API

REST endpoints for the catalog, checkout initiation, the post-payment success
page, and the Stripe webhook.
"""

import logging
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from core.exceptions import InvalidSignatureError, NotConfiguredError, StorageUnavailableError
from database.session import get_db
from delivery.notifier import OrderNotifier

from .catalog import list_active_products
from .checkout import CheckoutItem, CheckoutManager
from .config_store import EmailConfigCache, get_email_config_cache
from .schemas import (
    CheckoutInitiationRequest,
    CheckoutInitiationResponse,
    OrderStatusResponse,
    ProductResponse,
    WebhookAcknowledgement,
)
from .webhooks import WebhookProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/checkout", tags=["checkout"])
catalog_router = APIRouter(prefix="/api/v1/products", tags=["catalog"])
webhook_router = APIRouter(tags=["webhooks"])

# Process-wide instances; swapped out through dependency_overrides in tests
checkout_manager = CheckoutManager()
webhook_processor = WebhookProcessor()


# Dependency injection helpers
def get_checkout_manager() -> CheckoutManager:
    """Get checkout manager instance"""
    return checkout_manager


def get_webhook_processor() -> WebhookProcessor:
    """Get webhook processor instance"""
    return webhook_processor


def get_order_notifier(email_config_cache: EmailConfigCache = Depends(get_email_config_cache)) -> OrderNotifier:
    return OrderNotifier(email_config_cache)


# Catalog


@catalog_router.get("", response_model=List[ProductResponse], summary="List active products")
def list_products(db: Session = Depends(get_db)) -> List[ProductResponse]:
    return [ProductResponse.model_validate(product) for product in list_active_products(db)]


# Checkout


@router.post(
    "/initiate",
    response_model=CheckoutInitiationResponse,
    status_code=201,
    summary="Initiate checkout process",
    description="Create a pending order and a Stripe hosted checkout session for it",
)
def initiate_checkout(
    request: CheckoutInitiationRequest,
    db: Session = Depends(get_db),
    manager: CheckoutManager = Depends(get_checkout_manager),
) -> CheckoutInitiationResponse:
    """
    Initiate checkout process

    Returns the hosted checkout URL the client should redirect to. Errors
    propagate as StorefrontError subclasses and are rendered by the app-level
    handler.
    """
    logger.info(f"Initiating checkout for {request.customer_email} with {len(request.items)} items")

    items = [CheckoutItem(product_id=item.product_id, quantity=item.quantity) for item in request.items]
    result = manager.initiate_checkout(db, request.customer_email, items)

    return CheckoutInitiationResponse(**asdict(result))


@router.get(
    "/success",
    response_model=OrderStatusResponse,
    summary="Payment success page",
    description="Current status of the order behind a checkout session",
)
def payment_success(
    session_id: str,
    db: Session = Depends(get_db),
    manager: CheckoutManager = Depends(get_checkout_manager),
) -> OrderStatusResponse:
    """
    The customer can land here before the webhook arrives, so Pending is a
    normal answer; the page is expected to poll.
    """
    order = manager.get_order_for_session(db, session_id)
    return OrderStatusResponse(
        order_id=order.id,
        session_id=order.stripe_session_id,
        status=order.status.value,
        total_cents=order.total_cents,
        currency=order.currency,
        confirmed_at=order.confirmed_at,
    )


# Webhook


@webhook_router.post(
    "/webhook",
    response_model=WebhookAcknowledgement,
    summary="Stripe webhook endpoint",
    responses={
        400: {"description": "Not configured, or signature verification failed"},
        503: {"description": "Order store unavailable; Stripe will redeliver"},
    },
)
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    processor: WebhookProcessor = Depends(get_webhook_processor),
    notifier: OrderNotifier = Depends(get_order_notifier),
):
    """
    Stripe webhook endpoint

    The raw body is read once and passed untouched to verification. Every
    verified delivery gets ``{"received": true}``; only the order confirmation
    that actually changed state schedules the notification email, which runs
    after the response has been sent.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    try:
        result = await run_in_threadpool(processor.process_webhook, payload, signature)
    except NotConfiguredError:
        return PlainTextResponse("Not configured", status_code=400)
    except InvalidSignatureError as e:
        return PlainTextResponse(f"Error: {e.message}", status_code=400)
    except StorageUnavailableError as e:
        logger.error(f"Webhook deferred to processor redelivery: {e.message}")
        return PlainTextResponse("Storage unavailable", status_code=503)

    if result.order_confirmed and result.order_id:
        background_tasks.add_task(notifier.send_order_confirmation, result.order_id)

    return result.acknowledgement()
