"""Base payment gateway interface.

All gateway adapters must implement this interface.
Adapters only translate between the canonical schemas and a gateway's wire
format - routing and capability checks live in GatewayService.
"""

from abc import ABC, abstractmethod
from enum import Enum

from paylens.schemas.common import (
    PaymentMethod,
    PaymentRequest,
    PaymentResponse,
    RefundRequest,
    RefundResponse,
)


class GatewayType(str, Enum):
    """Registered gateway names."""

    PEACH = "peach"


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable gateway name."""

    @property
    @abstractmethod
    def supported_methods(self) -> tuple[PaymentMethod, ...]:
        """Payment methods this gateway accepts."""

    def supports_payment_method(self, method: PaymentMethod | str) -> bool:
        """Check whether the gateway accepts the given payment method."""
        try:
            return PaymentMethod(method) in self.supported_methods
        except ValueError:
            return False

    @abstractmethod
    async def process_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Create a payment.

        Args:
            request: Validated canonical payment request

        Returns:
            PaymentResponse. Gateway rejections (e.g. declined cards) come back
            with status FAILED and a failure_reason, not as exceptions.
        """

    @abstractmethod
    async def get_payment_status(self, payment_id: str) -> PaymentResponse:
        """Fetch the current state of a payment by gateway payment ID."""

    @abstractmethod
    async def process_refund(self, request: RefundRequest) -> RefundResponse:
        """Refund a payment, fully or partially."""

    @abstractmethod
    async def get_refund_status(self, refund_id: str) -> RefundResponse:
        """Fetch the current state of a refund by gateway refund ID."""

    @abstractmethod
    def validate_config(self) -> bool:
        """Return True if the gateway's configuration is valid."""

    async def aclose(self) -> None:
        """Release network resources held by the gateway."""
