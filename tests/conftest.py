"""
Shared fixtures for all tests
Provides an isolated in-memory database and order fixtures
"""
import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import account_management.models  # noqa: F401
import storefront.models  # noqa: F401
from database.base import Base
from storefront.models import Order, OrderItem, OrderStatus, PaymentConfig, Product


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_session_factory(tmp_path):
    """Session factory over an on-disk database, for tests that need real concurrent connections"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def payment_config(db_session):
    config = PaymentConfig(stripe_publishable_key="pk_test_123", stripe_secret_key="sk_test_123", active=True)
    db_session.add(config)
    db_session.commit()
    return config


@pytest.fixture
def product(db_session):
    product = Product(name="Chelsea Leather Boots", description="Premium UK leather", price_cents=18900, currency="gbp")
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture
def make_order(db_session):
    """Factory for orders attached to a checkout session"""

    def _make_order(session_id="cs_test_1", status=OrderStatus.PENDING, total_cents=18900, email="buyer@example.com"):
        order = Order(
            stripe_session_id=session_id,
            status=status,
            customer_email=email,
            total_cents=total_cents,
            currency="gbp",
        )
        order.items.append(
            OrderItem(product_name="Chelsea Leather Boots", unit_price_cents=total_cents, quantity=1)
        )
        db_session.add(order)
        db_session.commit()
        return order

    return _make_order
