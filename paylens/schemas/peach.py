"""Peach Payments configuration, wire schemas and result-code tables.

Wire field names follow the Peach Payments REST API (camelCase); Python
attributes are snake_case via the camel alias generator.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PeachEnvironment(str, Enum):
    """Peach Payments deployment environments."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"


PEACH_API_URLS: dict[PeachEnvironment, str] = {
    PeachEnvironment.SANDBOX: "https://testapi-v2.peachpayments.com",
    PeachEnvironment.PRODUCTION: "https://api-v2.peachpayments.com",
}


class PeachPaymentsConfig(BaseModel):
    """Peach Payments gateway configuration.

    `api_url` and `sandbox` are the legacy endpoint settings. They are still
    honoured, and `api_url` wins over the environment URL table when given.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity_id: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, repr=False)
    environment: PeachEnvironment
    timeout: float | None = Field(None, gt=0)  # seconds
    retries: int | None = Field(None, gt=0)
    # Legacy
    api_url: str | None = Field(None, pattern=r"^https?://\S+$")
    sandbox: bool | None = None


# Result codes, see https://developer.peachpayments.com/docs/reference-response-codes
SUCCESS_CODES = frozenset(
    {
        "000.000.000",  # Transaction succeeded
        "000.000.100",  # Successfully created checkout
        "000.100.110",  # Request successfully processed
        "000.100.111",
        "000.100.112",
    }
)

PENDING_CODES = frozenset(
    {
        "000.200.000",  # Transaction pending
        "800.400.500",  # Direct debit transaction pending
        "900.100.300",  # Transaction in progress
    }
)

REJECTED_CODES = frozenset(
    {
        "000.400.000",  # Declined
        "000.400.010",  # Invalid card number
        "000.400.020",  # Invalid expiry date
        "000.400.030",  # Invalid CVV
        "000.400.040",  # Invalid card holder
        "000.400.050",  # Declined by issuing bank
        "000.400.060",  # Declined, risk
        "000.400.070",  # Declined, fraud
        "000.400.080",  # Declined, velocity
        "000.400.090",  # Declined, amount limit
        "000.400.100",  # Declined, invalid request
    }
)

ERROR_CODES = frozenset(
    {
        "200.300.404",  # Invalid or missing parameter
        "800.300.401",  # Invalid authentication
        "900.400.500",  # System error
    }
)


class PeachModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class PeachCustomer(PeachModel):
    merchant_customer_id: str | None = None
    given_name: str | None = None
    surname: str | None = None
    email: str | None = None
    phone: str | None = None


class PeachBilling(PeachModel):
    street1: str
    city: str
    state: str | None = None
    postcode: str
    country: str


class PeachCard(PeachModel):
    number: str = Field(..., repr=False)
    holder: str
    expiry_month: str
    expiry_year: str
    cvv: str = Field(..., repr=False)


class PeachPaymentRequest(PeachModel):
    entity_id: str
    amount: str
    currency: str
    payment_type: str
    test_mode: str | None = None
    merchant_transaction_id: str | None = None
    customer: PeachCustomer | None = None
    billing: PeachBilling | None = None
    card: PeachCard | None = None
    shopper_result_url: str | None = None
    notification_url: str | None = None


class PeachRefundRequest(PeachModel):
    entity_id: str
    amount: str | None = None
    currency: str | None = None
    payment_type: str = "RF"
    test_mode: str | None = None


class PeachResult(PeachModel):
    code: str
    description: str = ""


class PeachResponse(PeachModel):
    """Payment, refund and status responses share this shape."""

    id: str
    payment_type: str | None = None
    payment_brand: str | None = None
    amount: str | None = None
    currency: str | None = None
    descriptor: str | None = None
    result: PeachResult
    result_details: dict[str, Any] | None = None
    build_number: str | None = None
    timestamp: str | None = None
    ndc: str | None = None
    redirect_url: str | None = None
