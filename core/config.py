"""
Configuration management using Pydantic Settings
Handles environment variables and validation
"""
from functools import lru_cache
from typing import Optional

from pydantic import ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings

DEFAULT_SESSION_SECRET = "dev-session-secret-change-in-production"
ADMIN_PASSWORD_MAX_BYTES = 72


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    testing: bool = Field(default=False)

    # Application
    app_name: str = "Storefront"
    app_version: str = "0.1.0"
    base_url: str = Field(default="http://localhost:3000")
    port: int = Field(default=3000)
    session_secret: SecretStr = Field(default=SecretStr(DEFAULT_SESSION_SECRET))

    # Database
    database_url: str = Field(default="sqlite:///./storefront.db")
    database_echo: bool = Field(default=False)

    # Stripe - keys are only used to seed the stored payment config on first run
    stripe_publishable_key: str = Field(default="pk_test_xxx")
    stripe_secret_key: SecretStr = Field(default=SecretStr("sk_test_xxx"))
    stripe_webhook_secret: Optional[SecretStr] = Field(default=None)
    stripe_webhook_tolerance: int = Field(default=300, description="Max signature age in seconds")
    currency: str = Field(default="gbp")

    # Email - environment defaults for the stored email config
    email_user: Optional[str] = Field(default=None)
    email_pass: Optional[SecretStr] = Field(default=None)
    seller_email: Optional[str] = Field(default=None)
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587)
    smtp_use_tls: bool = Field(default=True)
    smtp_timeout: int = Field(default=10)
    enable_emails: bool = Field(default=True)

    # Admin bootstrap
    admin_username: str = Field(default="admin")
    admin_password: Optional[SecretStr] = Field(default=None)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    # Monitoring
    prometheus_enabled: bool = Field(default=True)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v, info):
        if info.data.get("testing") and not v.startswith("sqlite"):
            # Force SQLite for testing
            return "sqlite:///:memory:"
        return v

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v):
        if len(v) != 3:
            raise ValueError("Currency must be a 3-letter ISO code")
        return v.lower()

    @field_validator("admin_password")
    @classmethod
    def validate_admin_password(cls, v):
        if v is None:
            return v
        password = v.get_secret_value()
        if len(password) < 8:
            raise ValueError("Admin password must be at least 8 characters")
        if len(password.encode("utf-8")) > ADMIN_PASSWORD_MAX_BYTES:
            raise ValueError(f"Admin password must be at most {ADMIN_PASSWORD_MAX_BYTES} bytes")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Validate production-specific settings after all fields are set"""
        if self.environment == "production":
            if self.session_secret.get_secret_value() == DEFAULT_SESSION_SECRET:
                raise ValueError("Session secret must be changed for production")
            if self.stripe_webhook_secret is None:
                raise ValueError("STRIPE_WEBHOOK_SECRET is required in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def webhook_secret_value(self) -> Optional[str]:
        """Plain webhook secret, or None when unset or blank"""
        if self.stripe_webhook_secret is None:
            return None
        return self.stripe_webhook_secret.get_secret_value() or None

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    def model_dump(self, **kwargs):
        """Override to mask sensitive fields when serializing"""
        data = super().model_dump(**kwargs)

        sensitive_fields = [
            "session_secret",
            "stripe_secret_key",
            "stripe_publishable_key",
            "stripe_webhook_secret",
            "email_pass",
            "admin_password",
        ]

        for field in sensitive_fields:
            if field in data and data[field]:
                if hasattr(data[field], "get_secret_value"):
                    value = data[field].get_secret_value()
                else:
                    value = str(data[field])

                # Keep first 4 chars for identification
                if len(value) > 4:
                    data[field] = value[:4] + "*" * (len(value) - 4)
                else:
                    data[field] = "*" * len(value)

        return data


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
