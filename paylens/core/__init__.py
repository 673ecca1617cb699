"""Core error taxonomy and HTTP transport."""

from paylens.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    GatewayError,
    NetworkError,
    PayLensError,
    PaymentError,
    RefundError,
    ValidationError,
)
from paylens.core.http import HttpClient, is_retryable

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "GatewayError",
    "NetworkError",
    "PayLensError",
    "PaymentError",
    "RefundError",
    "ValidationError",
    "HttpClient",
    "is_retryable",
]
