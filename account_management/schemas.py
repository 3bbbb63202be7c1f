"""
Pydantic schemas for Account Management
Request/response validation models
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from account_management.auth_service import BCRYPT_MAX_PASSWORD_BYTES


class AdminLogin(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=BCRYPT_MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v):
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return v


class AdminSessionResponse(BaseModel):
    username: str
    authenticated: bool = True


class AdminOrderResponse(BaseModel):
    id: str
    stripe_session_id: str | None = None
    status: str
    customer_email: str
    total_cents: int
    currency: str
    created_at: datetime | None = None
    confirmed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
