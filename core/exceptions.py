"""
Custom exceptions for the storefront
Provides structured error handling across the checkout and reconciliation flows
"""
from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(StorefrontError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field, **details} if field else details,
            status_code=400,
        )


class NotFoundError(StorefrontError):
    """Raised when a resource is not found"""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": str(identifier)},
            status_code=404,
        )


class NotConfiguredError(StorefrontError):
    """Raised when payment or webhook settings required for a request are missing.

    Nothing changed server side, so a retry has no value: 400.
    """

    def __init__(self, message: str = "Not configured", setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="NOT_CONFIGURED",
            details={"setting": setting} if setting else {},
            status_code=400,
        )


class InvalidSignatureError(StorefrontError):
    """Raised when a webhook payload fails authenticity verification"""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="INVALID_SIGNATURE",
            details={"reason": reason} if reason else {},
            status_code=400,
        )


class StorageUnavailableError(StorefrontError):
    """Raised when the database cannot be reached.

    Surfaces as 503 so the payment processor redelivers the event later.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="STORAGE_UNAVAILABLE",
            details={"operation": operation, **details} if operation else details,
            status_code=503,
        )


class CheckoutError(StorefrontError):
    """Raised when the payment processor refuses to open a checkout session"""

    def __init__(
        self,
        message: str,
        order_id: Optional[str] = None,
        stripe_error_code: Optional[str] = None,
        **details,
    ):
        super().__init__(
            message=message,
            error_code="CHECKOUT_ERROR",
            details={"order_id": order_id, "stripe_error_code": stripe_error_code, **details},
            status_code=502,
        )


class AuthenticationError(StorefrontError):
    """Raised when admin credentials are missing or wrong"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, error_code="AUTHENTICATION_ERROR", status_code=401)


class EmailDeliveryError(StorefrontError):
    """Raised when email delivery fails"""

    def __init__(
        self,
        message: str,
        email: Optional[str] = None,
        reason: Optional[str] = None,
        **details,
    ):
        super().__init__(
            message=message,
            error_code="EMAIL_DELIVERY_ERROR",
            details={"email": email, "reason": reason, **details},
            status_code=500,
        )
