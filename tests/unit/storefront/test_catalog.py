"""
Tests for catalog listing and first-run seeding
"""

import pytest

from account_management.models import AdminUser
from core.config import Settings
from storefront.bootstrap import bootstrap_database
from storefront.catalog import DEFAULT_PRODUCTS, PLACEHOLDER_IMAGE_URL, list_active_products, seed_products
from storefront.models import PaymentConfig, Product

pytestmark = pytest.mark.unit


class TestCatalog:
    def test_seed_products(self, db_session):
        assert seed_products(db_session) == 2

        products = list_active_products(db_session)
        assert [(p.name, p.price_cents, p.currency) for p in products] == [
            ("Chelsea Leather Boots", 18900, "gbp"),
            ("Oxford Brogues", 15900, "gbp"),
        ]
        assert all(p.image_url == PLACEHOLDER_IMAGE_URL for p in products)

    def test_seed_is_idempotent(self, db_session, product):
        assert seed_products(db_session) == 0
        assert db_session.query(Product).count() == 1

    def test_inactive_products_hidden(self, db_session):
        seed_products(db_session)
        db_session.query(Product).filter(Product.name == "Oxford Brogues").update({"active": False})
        db_session.commit()

        assert [p.name for p in list_active_products(db_session)] == ["Chelsea Leather Boots"]

    def test_default_products(self):
        assert {p["name"] for p in DEFAULT_PRODUCTS} == {"Chelsea Leather Boots", "Oxford Brogues"}


class TestBootstrap:
    def test_first_run(self, db_session):
        report = bootstrap_database(db_session, Settings(_env_file=None, admin_username="owner"))

        assert report.admin.created is True
        assert report.admin.username == "owner"
        assert report.admin.generated_password
        assert report.products_created == 2
        assert report.payment_config_created is True
        assert db_session.query(AdminUser).one().username == "owner"
        assert db_session.query(PaymentConfig).one().stripe_secret_key == "sk_test_xxx"

    def test_operator_password_not_echoed(self, db_session):
        report = bootstrap_database(db_session, Settings(_env_file=None, admin_password="operator-chosen-pw"))

        assert report.admin.created is True
        assert report.admin.generated_password is None

    def test_second_run_changes_nothing(self, db_session):
        settings = Settings(_env_file=None)
        bootstrap_database(db_session, settings)

        report = bootstrap_database(db_session, settings)

        assert report.admin.created is False
        assert report.products_created == 0
        assert report.payment_config_created is False
        assert db_session.query(AdminUser).count() == 1
