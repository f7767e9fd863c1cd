"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class LicenseNotFoundError(LicenseException):
    """Raised when no license exists for a caller."""

    def __init__(self, message: str = "No active license found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class BillingException(DomainException):
    """Base exception for billing provider errors."""

    pass


class WebhookSignatureError(BillingException):
    """Raised when a webhook payload fails signature verification."""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message, code="INVALID_SIGNATURE")


class BillingProviderError(BillingException):
    """
    Raised when the billing provider cannot be reached or rejects a call.

    This is a transient failure: callers are expected to retry.
    """

    def __init__(self, message: str = "Billing provider unavailable", operation: str = None):
        super().__init__(message, code="PROVIDER_UNAVAILABLE")
        self.operation = operation


class BillingConfigurationError(BillingException):
    """Raised when billing credentials are missing."""

    def __init__(self, message: str = "Billing provider is not configured"):
        super().__init__(message, code="BILLING_NOT_CONFIGURED")
