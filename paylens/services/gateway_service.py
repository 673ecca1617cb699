"""Payment gateway service.

Routes payment operations to the appropriate gateway adapter.
No gateway wire logic here - only registry, routing and capability checks.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from paylens.config import Settings, get_settings
from paylens.core.exceptions import ConfigurationError, ValidationError
from paylens.gateways.base import GatewayType, PaymentGateway
from paylens.gateways.peach import PeachPaymentsGateway
from paylens.schemas.common import (
    PaymentMethod,
    PaymentRequest,
    PaymentResponse,
    RefundRequest,
    RefundResponse,
    validate_payment_request,
    validate_refund_request,
)
from paylens.schemas.peach import PeachPaymentsConfig


@dataclass(frozen=True)
class GatewayServiceConfig:
    """Per-gateway configuration. Unset gateways are not registered."""

    peach_payments: PeachPaymentsConfig | Mapping[str, Any] | None = None


# Config key -> (registered name, adapter class), in registration order.
# The first configured gateway becomes the default.
GATEWAY_SLOTS: tuple[tuple[str, GatewayType, type[PaymentGateway]], ...] = (
    ("peach_payments", GatewayType.PEACH, PeachPaymentsGateway),
)


def _require_id(value: Any, label: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required", field=field)
    return value


class GatewayService:
    """Unified entry point for payments and refunds across gateways."""

    def __init__(
        self,
        config: GatewayServiceConfig | Mapping[str, Any],
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._gateways: dict[str, PaymentGateway] = {}
        self._default_gateway: str | None = None
        self._initialize_gateways(config, transport=transport, sleep=sleep)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "GatewayService":
        """Build a service from PAYLENS_* environment configuration."""
        settings = settings or get_settings()
        return cls(
            GatewayServiceConfig(peach_payments=settings.peach_payments_config()),
            **kwargs,
        )

    def _initialize_gateways(
        self,
        config: GatewayServiceConfig | Mapping[str, Any],
        **gateway_options: Any,
    ) -> None:
        if isinstance(config, Mapping):
            unknown = set(config) - {slot for slot, _, _ in GATEWAY_SLOTS}
            if unknown:
                raise ConfigurationError(
                    f"Unknown gateway configuration: {', '.join(sorted(unknown))}",
                    parameter=sorted(unknown)[0],
                )
            slots = config
        elif isinstance(config, GatewayServiceConfig):
            slots = vars(config)
        else:
            raise ConfigurationError("Gateway configuration must be a mapping")

        for slot, gateway_type, gateway_class in GATEWAY_SLOTS:
            gateway_config = slots.get(slot)
            if gateway_config is None:
                continue

            try:
                gateway = gateway_class(gateway_config, logger=self._logger, **gateway_options)
            except Exception as e:
                raise ConfigurationError(
                    f"Failed to initialize {slot} gateway: {e}",
                    parameter=slot,
                    cause=e,
                ) from e

            self._gateways[gateway_type.value] = gateway
            if self._default_gateway is None:
                self._default_gateway = gateway_type.value
            self._logger.info(f"Registered payment gateway '{gateway_type.value}' ({gateway.name})")

        if not self._gateways:
            raise ConfigurationError(
                "No payment gateways configured. "
                "Please provide at least one gateway configuration."
            )

    def _get_gateway(self, gateway_name: str | None = None) -> PaymentGateway:
        target = gateway_name or self._default_gateway
        if not target:
            raise ConfigurationError("No gateway specified and no default gateway set")

        gateway = self._gateways.get(target)
        if gateway is None:
            raise ConfigurationError(
                f"Gateway {target} not found. "
                f"Available gateways: {', '.join(self.get_available_gateways())}",
                parameter="gateway_name",
            )
        return gateway

    async def process_payment(
        self,
        request: PaymentRequest | Mapping[str, Any],
        gateway_name: str | None = None,
    ) -> PaymentResponse:
        """Process a payment via the named or default gateway."""
        request = validate_payment_request(request)
        gateway = self._get_gateway(gateway_name)

        if not gateway.supports_payment_method(request.payment_method):
            raise ValidationError(
                f"Gateway {gateway.name} does not support payment method "
                f"{request.payment_method.value}",
                field="payment_method",
            )

        self._logger.debug(
            f"Routing {request.payment_method.value} payment to {gateway.name}"
        )
        return await gateway.process_payment(request)

    async def get_payment_status(
        self,
        payment_id: str,
        gateway_name: str | None = None,
    ) -> PaymentResponse:
        """Get payment status from the named or default gateway."""
        payment_id = _require_id(payment_id, "Payment ID", "payment_id")
        gateway = self._get_gateway(gateway_name)
        return await gateway.get_payment_status(payment_id)

    async def process_refund(
        self,
        request: RefundRequest | Mapping[str, Any],
        gateway_name: str | None = None,
    ) -> RefundResponse:
        """Process a refund via the named or default gateway."""
        request = validate_refund_request(request)
        gateway = self._get_gateway(gateway_name)
        return await gateway.process_refund(request)

    async def get_refund_status(
        self,
        refund_id: str,
        gateway_name: str | None = None,
    ) -> RefundResponse:
        """Get refund status from the named or default gateway."""
        refund_id = _require_id(refund_id, "Refund ID", "refund_id")
        gateway = self._get_gateway(gateway_name)
        return await gateway.get_refund_status(refund_id)

    def get_available_gateways(self) -> list[str]:
        return list(self._gateways)

    def get_gateway_info(self, gateway_name: str) -> dict[str, Any]:
        """Return the gateway's display name and supported payment methods."""
        gateway = self._gateways.get(gateway_name)
        if gateway is None:
            raise ConfigurationError(f"Gateway {gateway_name} not found", parameter="gateway_name")

        supported_methods: list[PaymentMethod] = list(gateway.supported_methods)
        return {"name": gateway.name, "supported_methods": supported_methods}

    @property
    def default_gateway(self) -> str | None:
        return self._default_gateway

    def set_default_gateway(self, gateway_name: str) -> None:
        """Change the gateway used when calls don't name one.

        In-flight calls that already resolved their gateway are unaffected.
        """
        if gateway_name not in self._gateways:
            raise ConfigurationError(f"Gateway {gateway_name} not found", parameter="gateway_name")
        self._default_gateway = gateway_name

    def is_gateway_available(self, gateway_name: str) -> bool:
        return gateway_name in self._gateways

    async def aclose(self) -> None:
        """Close every gateway's HTTP transport."""
        for gateway in self._gateways.values():
            await gateway.aclose()

    async def __aenter__(self) -> "GatewayService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
