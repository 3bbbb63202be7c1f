"""
First-run data bootstrap

Creates the administrator, the starter catalog and the payment config when
they are missing. Every step is a no-op on a populated database, so it runs on
each startup as well as from ``storefront seed``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from account_management.auth_service import AdminBootstrapResult, AuthService
from core.config import Settings, get_settings

from .catalog import seed_products
from .config_store import seed_payment_config

logger = logging.getLogger(__name__)


@dataclass
class BootstrapReport:
    admin: AdminBootstrapResult
    products_created: int
    payment_config_created: bool


def bootstrap_database(db: Session, settings: Optional[Settings] = None) -> BootstrapReport:
    settings = settings or get_settings()

    admin_password = settings.admin_password.get_secret_value() if settings.admin_password else None
    admin = AuthService.ensure_admin_user(db, settings.admin_username, admin_password)

    products_created = seed_products(db, currency=settings.currency)
    payment_config_created = seed_payment_config(db, settings)

    return BootstrapReport(
        admin=admin,
        products_created=products_created,
        payment_config_created=payment_config_created,
    )
