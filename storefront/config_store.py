"""
Storefront configuration store

Stored payment processor credentials and the process-scoped email settings cache.

The email settings are resolved once per process: loaded from the database, seeded
from the environment when no record exists, or (when the database cannot be read)
taken from the environment without being persisted. Whichever value the first
call produces is kept until the process exits or ``reset()`` is called.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from core.exceptions import NotConfiguredError, StorageUnavailableError
from core.metrics import metrics
from database.session import SessionLocal

from .models import EmailConfig, PaymentConfig

logger = logging.getLogger(__name__)


# Payment configuration


def get_active_payment_config(db: Session) -> PaymentConfig:
    """
    Return the single active payment configuration

    Raises:
        NotConfiguredError: no active record, or the record has no secret key
        StorageUnavailableError: the database could not be queried
    """
    try:
        config = (
            db.query(PaymentConfig)
            .filter(PaymentConfig.active.is_(True))
            .order_by(PaymentConfig.created_at.desc())
            .first()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load payment config: {e}")
        raise StorageUnavailableError("Payment configuration could not be loaded", operation="load_payment_config")

    if config is None or not config.stripe_secret_key:
        raise NotConfiguredError("Payment processor is not configured", setting="stripe_secret_key")

    return config


def seed_payment_config(db: Session, settings: Optional[Settings] = None) -> bool:
    """Create the payment config from environment values if none exists. Returns True when created."""
    settings = settings or get_settings()

    if db.query(PaymentConfig).count() > 0:
        return False

    db.add(
        PaymentConfig(
            stripe_publishable_key=settings.stripe_publishable_key,
            stripe_secret_key=settings.stripe_secret_key.get_secret_value(),
            active=True,
        )
    )
    db.commit()
    logger.info("Stripe config seeded from environment")
    return True


# Email configuration


@dataclass(frozen=True)
class EmailSettings:
    """Resolved email settings; immutable so the cached value cannot drift"""

    email_user: Optional[str]
    email_pass: Optional[str]
    seller_email: Optional[str]
    source: str = "environment"

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailSettings":
        return cls(
            email_user=settings.email_user,
            email_pass=settings.email_pass.get_secret_value() if settings.email_pass else None,
            seller_email=settings.seller_email,
            source="environment",
        )

    @classmethod
    def from_record(cls, record: EmailConfig) -> "EmailSettings":
        return cls(
            email_user=record.email_user,
            email_pass=record.email_pass,
            seller_email=record.seller_email,
            source="database",
        )

    @property
    def is_complete(self) -> bool:
        """All three values are present, so mail can actually be sent"""
        return bool(self.email_user and self.email_pass and self.seller_email)

    def __repr__(self):
        # Never render the password
        return (
            f"EmailSettings(email_user={self.email_user!r}, seller_email={self.seller_email!r}, "
            f"source={self.source!r})"
        )


class EmailConfigCache:
    """
    Lazily initialised, process-wide email settings

    The first ``get()`` resolves the value; every later call returns the same
    object without touching storage, even if the stored record changes or the
    first resolution fell back to environment defaults.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        settings_provider: Callable[[], Settings] = get_settings,
    ):
        self._session_factory = session_factory
        self._settings_provider = settings_provider
        self._value: Optional[EmailSettings] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._value is not None

    def get(self) -> EmailSettings:
        value = self._value
        if value is not None:
            return value

        with self._lock:
            if self._value is None:
                self._value = self._resolve()
                metrics.track_email_config_load(self._value.source)
            return self._value

    def reset(self) -> None:
        """Forget the cached value; the next get() resolves again"""
        with self._lock:
            self._value = None

    def _resolve(self) -> EmailSettings:
        defaults = EmailSettings.from_settings(self._settings_provider())

        try:
            with self._session_factory() as db:
                record = db.query(EmailConfig).first()
                if record is not None:
                    return EmailSettings.from_record(record)

                logger.info("No EmailConfig stored, seeding from environment")
                db.add(
                    EmailConfig(
                        email_user=defaults.email_user,
                        email_pass=defaults.email_pass,
                        seller_email=defaults.seller_email,
                    )
                )
                db.commit()
                return replace(defaults, source="seeded")

        except SQLAlchemyError as e:
            logger.error(f"EmailConfig load failed, using environment defaults for this process: {e}")
            return defaults


# Process-scoped instance; handlers receive it through get_email_config_cache()
email_config_cache = EmailConfigCache()


def get_email_config_cache() -> EmailConfigCache:
    """FastAPI dependency for the email settings cache"""
    return email_config_cache


def get_email_config() -> EmailSettings:
    """Resolved email settings for this process"""
    return email_config_cache.get()
