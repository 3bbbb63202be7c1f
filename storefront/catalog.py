"""
Storefront catalog: product listing and first-run product seeding
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from .models import Product

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/300"

DEFAULT_PRODUCTS = [
    {
        "name": "Chelsea Leather Boots",
        "description": "Premium UK leather",
        "price_cents": 18900,
        "image_url": PLACEHOLDER_IMAGE_URL,
    },
    {
        "name": "Oxford Brogues",
        "description": "Classic British",
        "price_cents": 15900,
        "image_url": PLACEHOLDER_IMAGE_URL,
    },
]


def list_active_products(db: Session) -> List[Product]:
    return db.query(Product).filter(Product.active.is_(True)).order_by(Product.name).all()


def seed_products(db: Session, currency: str = "gbp") -> int:
    """Insert the starter catalog when the products table is empty. Returns the number inserted."""
    if db.query(Product).count() > 0:
        return 0

    db.add_all(Product(currency=currency, **product) for product in DEFAULT_PRODUCTS)
    db.commit()
    logger.info(f"{len(DEFAULT_PRODUCTS)} products seeded")
    return len(DEFAULT_PRODUCTS)
