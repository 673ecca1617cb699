"""PayLens: one client for payments and refunds across payment gateways."""

__version__ = "0.1.0"

from paylens.core.exceptions import (  # noqa: E402
    AuthenticationError,
    ConfigurationError,
    GatewayError,
    NetworkError,
    PayLensError,
    PaymentError,
    RefundError,
    ValidationError,
    create_gateway_error,
    create_network_error,
    create_payment_error,
    create_validation_error,
)
from paylens.core.http import HttpClient  # noqa: E402
from paylens.gateways.base import GatewayType, PaymentGateway  # noqa: E402
from paylens.gateways.peach import PeachPaymentsGateway  # noqa: E402
from paylens.schemas.common import (  # noqa: E402
    Amount,
    BillingAddress,
    CardDetails,
    Currency,
    Customer,
    PaymentMethod,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    RefundRequest,
    RefundResponse,
    validate_payment_request,
    validate_refund_request,
)
from paylens.schemas.peach import PeachEnvironment, PeachPaymentsConfig  # noqa: E402
from paylens.services.gateway_service import (  # noqa: E402
    GatewayService,
    GatewayServiceConfig,
)

__all__ = [
    "__version__",
    "GatewayService",
    "GatewayServiceConfig",
    "PaymentGateway",
    "GatewayType",
    "PeachPaymentsGateway",
    "PeachPaymentsConfig",
    "PeachEnvironment",
    "HttpClient",
    "Amount",
    "BillingAddress",
    "CardDetails",
    "Currency",
    "Customer",
    "PaymentMethod",
    "PaymentRequest",
    "PaymentResponse",
    "PaymentStatus",
    "RefundRequest",
    "RefundResponse",
    "validate_payment_request",
    "validate_refund_request",
    "PayLensError",
    "ValidationError",
    "AuthenticationError",
    "PaymentError",
    "RefundError",
    "NetworkError",
    "ConfigurationError",
    "GatewayError",
    "create_validation_error",
    "create_payment_error",
    "create_network_error",
    "create_gateway_error",
]
