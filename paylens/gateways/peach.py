"""Peach Payments gateway adapter.

Peach Payments integration for the South African market.
Documentation: https://developer.peachpayments.com/docs
"""

import asyncio
import base64
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from paylens.core.exceptions import (
    NetworkError,
    PayLensError,
    PaymentError,
    RefundError,
    ValidationError,
)
from paylens.core.http import HttpClient
from paylens.gateways.base import GatewayType, PaymentGateway
from paylens.schemas.common import (
    Amount,
    PaymentMethod,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    RefundRequest,
    RefundResponse,
)
from paylens.schemas.peach import (
    ERROR_CODES,
    PEACH_API_URLS,
    PENDING_CODES,
    REJECTED_CODES,
    SUCCESS_CODES,
    PeachBilling,
    PeachCard,
    PeachCustomer,
    PeachEnvironment,
    PeachPaymentRequest,
    PeachPaymentsConfig,
    PeachRefundRequest,
    PeachResponse,
)
from paylens.utils.references import generate_reference

# Peach payment types
PAYMENT_TYPE_DEBIT = "DB"  # Immediate charge
PAYMENT_TYPE_DIRECT_DEBIT = "DD"

PAYMENT_TYPES: dict[PaymentMethod, str] = {
    PaymentMethod.CARD: PAYMENT_TYPE_DEBIT,
    PaymentMethod.EFT: PAYMENT_TYPE_DIRECT_DEBIT,
    PaymentMethod.MOBILE_WALLET: PAYMENT_TYPE_DEBIT,
}

TEST_MODE_EXTERNAL = "EXTERNAL"

# Errors raised while building requests or reading gateway responses
_MAPPING_ERRORS = (PayLensError, ValueError, ArithmeticError)

_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S%z",
)


def classify_result_code(code: str) -> PaymentStatus:
    """Map a Peach result code to a canonical status.

    Unknown codes are PENDING: never claim success or failure on a code we
    don't recognise.
    """
    if code in SUCCESS_CODES:
        return PaymentStatus.COMPLETED
    if code in PENDING_CODES:
        return PaymentStatus.PROCESSING
    if code in REJECTED_CODES or code in ERROR_CODES:
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING


def map_payment_brand(brand: str | None) -> PaymentMethod:
    """Map a Peach paymentBrand (VISA, MASTER, EFT_SECURE...) to a payment method."""
    if not brand:
        return PaymentMethod.CARD

    brand = brand.lower()
    if any(card in brand for card in ("visa", "master", "amex", "diners")):
        return PaymentMethod.CARD
    if "eft" in brand or "bank" in brand:
        return PaymentMethod.EFT
    if "wallet" in brand or "paypal" in brand:
        return PaymentMethod.MOBILE_WALLET
    return PaymentMethod.CARD


def normalize_config(
    config: Mapping[str, Any],
    logger: logging.Logger | None = None,
) -> dict[str, Any]:
    """Translate the legacy api_url + sandbox shape into an environment."""
    normalized = dict(config)
    if (
        normalized.get("api_url")
        and normalized.get("sandbox") is not None
        and not normalized.get("environment")
    ):
        (logger or logging.getLogger(__name__)).warning(
            "[PayLens] Using legacy Peach Payments configuration (api_url + sandbox). "
            "Please migrate to environment-based configuration."
        )
        normalized["environment"] = (
            PeachEnvironment.SANDBOX if normalized["sandbox"] else PeachEnvironment.PRODUCTION
        )
    return normalized


def resolve_api_url(config: PeachPaymentsConfig) -> str:
    """An explicit (legacy) api_url always wins over the environment table."""
    if config.api_url:
        return config.api_url
    return PEACH_API_URLS[config.environment]


def create_auth_header(config: PeachPaymentsConfig) -> str:
    credentials = f"{config.username}:{config.password}"
    return base64.b64encode(credentials.encode()).decode()


def parse_timestamp(value: str | None) -> datetime:
    """Parse a Peach timestamp like '2024-01-15 10:30:00.123+0000'."""
    if value:
        for fmt in _TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


def _gateway_code(error: BaseException) -> str | None:
    """Pull result.code out of an HTTP error body, if the gateway sent one."""
    if isinstance(error, NetworkError) and isinstance(error.response, dict):
        result = error.response.get("result")
        if isinstance(result, dict):
            return result.get("code")
    return None


class PeachPaymentsGateway(PaymentGateway):
    """Peach Payments gateway implementation."""

    SUPPORTED_METHODS = (
        PaymentMethod.CARD,
        PaymentMethod.EFT,
        PaymentMethod.MOBILE_WALLET,
    )

    def __init__(
        self,
        config: PeachPaymentsConfig | Mapping[str, Any],
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._config = self._load_config(config)
        self._api_url = resolve_api_url(self._config)

        self._http = HttpClient(
            self._api_url,
            timeout=self._config.timeout,
            retries=self._config.retries,
            headers={"Authorization": f"Basic {create_auth_header(self._config)}"},
            transport=transport,
            sleep=sleep,
            logger=self._logger,
        )

    def _load_config(self, config: PeachPaymentsConfig | Mapping[str, Any]) -> PeachPaymentsConfig:
        if isinstance(config, PeachPaymentsConfig):
            return config
        if not isinstance(config, Mapping):
            raise ValidationError(
                "Invalid Peach Payments configuration: expected a mapping",
                field="config",
            )
        try:
            return PeachPaymentsConfig.model_validate(normalize_config(config, self._logger))
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid Peach Payments configuration: {e}",
                errors=e.errors(include_url=False),
                cause=e,
            ) from e

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.PEACH

    @property
    def name(self) -> str:
        return "PeachPayments"

    @property
    def supported_methods(self) -> tuple[PaymentMethod, ...]:
        return self.SUPPORTED_METHODS

    @property
    def api_url(self) -> str:
        return self._api_url

    @property
    def is_sandbox(self) -> bool:
        if self._config.sandbox is not None:
            return self._config.sandbox
        return self._config.environment == PeachEnvironment.SANDBOX

    @property
    def timeout(self) -> float:
        return self._http.timeout

    @property
    def retries(self) -> int:
        return self._http.retries

    def validate_config(self) -> bool:
        try:
            PeachPaymentsConfig.model_validate(self._config.model_dump())
        except PydanticValidationError:
            return False
        return True

    async def process_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Create a Peach payment (POST /payments)."""
        try:
            peach_request = self._map_payment_request(request)
            data = await self._http.post(
                "/payments",
                peach_request.model_dump(by_alias=True, exclude_none=True),
            )
            return self._map_payment_response(
                PeachResponse.model_validate(data),
                request,
                peach_request.merchant_transaction_id,
            )
        except _MAPPING_ERRORS as e:
            raise PaymentError(
                f"Payment processing failed: {e}",
                gateway_code=_gateway_code(e),
                cause=e,
            ) from e

    async def get_payment_status(self, payment_id: str) -> PaymentResponse:
        """Fetch payment status (GET /payments/{id}?entityId=...)."""
        try:
            data = await self._http.get(
                f"/payments/{quote(payment_id, safe='')}",
                params={"entityId": self._config.entity_id},
            )
            return self._map_status_to_payment_response(PeachResponse.model_validate(data))
        except _MAPPING_ERRORS as e:
            raise PaymentError(
                f"Failed to get payment status: {e}",
                payment_id=payment_id,
                gateway_code=_gateway_code(e),
                cause=e,
            ) from e

    async def process_refund(self, request: RefundRequest) -> RefundResponse:
        """Refund a payment (POST /payments/{paymentId} with paymentType RF)."""
        try:
            peach_request = self._map_refund_request(request)
            data = await self._http.post(
                f"/payments/{quote(request.payment_id, safe='')}",
                peach_request.model_dump(by_alias=True, exclude_none=True),
            )
            return self._map_refund_response(PeachResponse.model_validate(data), request)
        except _MAPPING_ERRORS as e:
            raise RefundError(
                f"Refund processing failed: {e}",
                payment_id=request.payment_id,
                gateway_code=_gateway_code(e),
                cause=e,
            ) from e

    async def get_refund_status(self, refund_id: str) -> RefundResponse:
        """Fetch refund status (GET /payments/{refundId}?entityId=...)."""
        try:
            data = await self._http.get(
                f"/payments/{quote(refund_id, safe='')}",
                params={"entityId": self._config.entity_id},
            )
            return self._map_status_to_refund_response(PeachResponse.model_validate(data))
        except _MAPPING_ERRORS as e:
            raise RefundError(
                f"Failed to get refund status: {e}",
                refund_id=refund_id,
                gateway_code=_gateway_code(e),
                cause=e,
            ) from e

    async def aclose(self) -> None:
        await self._http.aclose()

    # ==================== REQUEST MAPPING ====================

    def _map_payment_request(self, request: PaymentRequest) -> PeachPaymentRequest:
        peach_request = PeachPaymentRequest(
            entity_id=self._config.entity_id,
            amount=f"{request.amount.value:.2f}",
            currency=request.amount.currency.value,
            payment_type=PAYMENT_TYPES.get(request.payment_method, PAYMENT_TYPE_DEBIT),
            test_mode=TEST_MODE_EXTERNAL if self.is_sandbox else None,
            merchant_transaction_id=request.reference or generate_reference(self.name),
        )

        if request.customer:
            peach_request.customer = PeachCustomer(
                merchant_customer_id=request.customer.id,
                given_name=request.customer.first_name,
                surname=request.customer.last_name,
                email=request.customer.email,
                phone=request.customer.phone,
            )

        if request.billing_address:
            peach_request.billing = PeachBilling(
                street1=request.billing_address.line1,
                city=request.billing_address.city,
                state=request.billing_address.state,
                postcode=request.billing_address.postal_code,
                country=request.billing_address.country,
            )

        if request.card_details:
            peach_request.card = PeachCard(
                number=request.card_details.number,
                holder=request.card_details.holder_name or "",
                expiry_month=request.card_details.expiry_month,
                expiry_year=request.card_details.expiry_year,
                cvv=request.card_details.cvv,
            )

        if request.return_url:
            peach_request.shopper_result_url = request.return_url

        if request.webhook_url:
            peach_request.notification_url = request.webhook_url

        return peach_request

    def _map_refund_request(self, request: RefundRequest) -> PeachRefundRequest:
        # No amount: full refund, left to Peach to resolve
        return PeachRefundRequest(
            entity_id=self._config.entity_id,
            amount=f"{request.amount.value:.2f}" if request.amount else None,
            currency=request.amount.currency.value if request.amount else None,
            test_mode=TEST_MODE_EXTERNAL if self.is_sandbox else None,
        )

    # ==================== RESPONSE MAPPING ====================

    @staticmethod
    def _metadata(response: PeachResponse) -> dict[str, Any]:
        return {
            "gateway_response": response.model_dump(by_alias=True, exclude_none=True),
            "result_code": response.result.code,
            "result_description": response.result.description,
        }

    @staticmethod
    def _failure_reason(response: PeachResponse, status: PaymentStatus) -> str | None:
        if status == PaymentStatus.FAILED:
            return response.result.description or response.result.code
        return None

    @staticmethod
    def _amount(response: PeachResponse) -> Amount | None:
        if response.amount is None:
            return None
        return Amount(value=Decimal(response.amount), currency=response.currency)

    def _map_payment_response(
        self,
        response: PeachResponse,
        request: PaymentRequest,
        reference: str | None,
    ) -> PaymentResponse:
        status = classify_result_code(response.result.code)
        return PaymentResponse(
            id=response.id,
            status=status,
            amount=request.amount,
            payment_method=request.payment_method,
            reference=reference,
            gateway_reference=response.id,
            created_at=parse_timestamp(response.timestamp),
            metadata=self._metadata(response),
            redirect_url=response.redirect_url,
            failure_reason=self._failure_reason(response, status),
        )

    def _map_status_to_payment_response(self, response: PeachResponse) -> PaymentResponse:
        status = classify_result_code(response.result.code)
        amount = self._amount(response)
        if amount is None:
            raise ValueError(f"Peach response {response.id} has no amount")
        return PaymentResponse(
            id=response.id,
            status=status,
            amount=amount,
            payment_method=map_payment_brand(response.payment_brand),
            gateway_reference=response.id,
            created_at=parse_timestamp(response.timestamp),
            metadata=self._metadata(response),
            redirect_url=response.redirect_url,
            failure_reason=self._failure_reason(response, status),
        )

    def _map_refund_response(
        self,
        response: PeachResponse,
        request: RefundRequest,
    ) -> RefundResponse:
        return RefundResponse(
            id=response.id,
            payment_id=request.payment_id,
            status=classify_result_code(response.result.code),
            amount=self._amount(response) or request.amount,
            reason=request.reason,
            reference=request.reference,
            gateway_reference=response.id,
            created_at=parse_timestamp(response.timestamp),
            metadata=self._metadata(response),
        )

    def _map_status_to_refund_response(self, response: PeachResponse) -> RefundResponse:
        # The status endpoint does not echo the original payment ID
        return RefundResponse(
            id=response.id,
            payment_id="",
            status=classify_result_code(response.result.code),
            amount=self._amount(response),
            gateway_reference=response.id,
            created_at=parse_timestamp(response.timestamp),
            metadata=self._metadata(response),
        )
