"""Canonical, gateway-agnostic payment schemas."""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic import ValidationError as PydanticValidationError

from paylens.core.exceptions import ValidationError


class PaymentStatus(str, Enum):
    """Gateway-independent payment/refund status."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class PaymentMethod(str, Enum):
    """Payment instruments a gateway may support."""

    CARD = "card"
    EFT = "eft"
    MOBILE_WALLET = "mobile_wallet"
    BANK_TRANSFER = "bank_transfer"
    CRYPTOCURRENCY = "cryptocurrency"


class Currency(str, Enum):
    """Supported ISO 4217 currencies."""

    ZAR = "ZAR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class Amount(BaseModel):
    """Monetary amount in major units (e.g. 100.00 ZAR)."""

    model_config = ConfigDict(frozen=True)

    value: Decimal = Field(..., gt=0, decimal_places=2)
    currency: Currency


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class BillingAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    line1: str = Field(..., min_length=1)
    line2: str | None = None
    city: str = Field(..., min_length=1)
    state: str | None = None
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=2, max_length=2)  # ISO 3166-1 alpha-2


class CardDetails(BaseModel):
    """Raw card data. Forwarded to the gateway, never stored or logged."""

    model_config = ConfigDict(frozen=True)

    number: str = Field(..., pattern=r"^\d{13,19}$", repr=False)
    expiry_month: str = Field(..., pattern=r"^(0[1-9]|1[0-2])$")
    expiry_year: str = Field(..., pattern=r"^\d{2}$")
    cvv: str = Field(..., pattern=r"^\d{3,4}$", repr=False)
    holder_name: str | None = None


class PaymentRequest(BaseModel):
    """Schema for initiating a payment."""

    model_config = ConfigDict(frozen=True)

    amount: Amount
    customer: Customer
    payment_method: PaymentMethod
    # Caller correlation id; generated by the adapter when absent
    reference: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None
    billing_address: BillingAddress | None = None
    card_details: CardDetails | None = None
    return_url: str | None = Field(None, pattern=r"^https?://")
    webhook_url: str | None = Field(None, pattern=r"^https?://")


class PaymentResponse(BaseModel):
    """Schema for a payment as reported by a gateway."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: PaymentStatus
    amount: Amount
    payment_method: PaymentMethod
    reference: str | None = None
    gateway_reference: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    # Raw gateway response passthrough, for debugging only
    metadata: dict[str, Any] = Field(default_factory=dict)
    redirect_url: str | None = None
    failure_reason: str | None = None


class RefundRequest(BaseModel):
    """Schema for refunding a payment. No amount means a full refund."""

    model_config = ConfigDict(frozen=True)

    payment_id: str = Field(..., min_length=1)
    amount: Amount | None = None
    reason: str | None = None
    reference: str | None = None


class RefundResponse(BaseModel):
    """Schema for a refund as reported by a gateway."""

    model_config = ConfigDict(frozen=True)

    id: str
    payment_id: str
    status: PaymentStatus
    amount: Amount | None = None
    reason: str | None = None
    reference: str | None = None
    gateway_reference: str | None = None
    created_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)


def _format_errors(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'request'}: {err['msg']}"
        for err in exc.errors()
    )


def validate_payment_request(data: PaymentRequest | Mapping[str, Any]) -> PaymentRequest:
    """Return a validated PaymentRequest, raising ValidationError otherwise."""
    if isinstance(data, PaymentRequest):
        return data
    try:
        return PaymentRequest.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid payment request: {_format_errors(e)}",
            errors=e.errors(include_url=False),
            cause=e,
        ) from e


def validate_refund_request(data: RefundRequest | Mapping[str, Any]) -> RefundRequest:
    """Return a validated RefundRequest, raising ValidationError otherwise."""
    if isinstance(data, RefundRequest):
        return data
    try:
        return RefundRequest.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid refund request: {_format_errors(e)}",
            errors=e.errors(include_url=False),
            cause=e,
        ) from e
