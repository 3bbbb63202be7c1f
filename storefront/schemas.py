"""
Storefront API Schemas

Pydantic models for checkout, catalog and webhook API requests and responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class CheckoutItemRequest(BaseModel):
    """Product and quantity in a checkout request"""

    product_id: str = Field(..., min_length=1, description="Catalog product id")
    quantity: int = Field(1, ge=1, le=100, description="Quantity to purchase")


class CheckoutInitiationRequest(BaseModel):
    """Request schema for starting checkout"""

    customer_email: EmailStr = Field(..., description="Customer email address")
    items: List[CheckoutItemRequest] = Field(..., min_length=1, max_length=20)

    @field_validator("items")
    @classmethod
    def validate_unique_products(cls, v):
        ids = [item.product_id for item in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Each product may appear only once; use quantity instead")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "customer_email": "customer@example.com",
                "items": [{"product_id": "5f0c6d1e-8a3b-4c1d-9e2f-1a2b3c4d5e6f", "quantity": 1}],
            }
        }
    )


class CheckoutInitiationResponse(BaseModel):
    """Redirect information for the hosted checkout page"""

    order_id: str
    session_id: str
    checkout_url: str
    total_cents: int
    currency: str


class OrderStatusResponse(BaseModel):
    """Order state shown on the success page"""

    order_id: str
    session_id: str
    status: str
    total_cents: int
    currency: str
    confirmed_at: Optional[datetime] = None


class ProductResponse(BaseModel):
    """Catalog entry"""

    id: str
    name: str
    description: Optional[str] = None
    price_cents: int
    currency: str
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WebhookAcknowledgement(BaseModel):
    """Body returned to Stripe for every verified delivery"""

    received: bool = True
