"""Shared fixtures for PayLens tests.

HTTP is served by httpx.MockTransport and backoff goes through a recording
sleep, so nothing here touches the network or actually waits.
"""

import json
from collections.abc import Callable
from decimal import Decimal

import httpx
import pytest

from paylens.schemas.common import (
    Amount,
    CardDetails,
    Currency,
    Customer,
    PaymentMethod,
    PaymentRequest,
)
from paylens.schemas.peach import PeachEnvironment

SUCCESS_CODE = "000.000.000"


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingHandler:
    """MockTransport handler replaying queued responses and recording requests."""

    def __init__(self, responses: list[httpx.Response | Exception] | None = None):
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def peach_body(
    code: str = SUCCESS_CODE,
    description: str = "Transaction succeeded",
    **overrides,
) -> dict:
    body = {
        "id": "8ac7a4a1845f7e2a01845f9b9c7d0123",
        "paymentType": "DB",
        "paymentBrand": "VISA",
        "amount": "100.00",
        "currency": "ZAR",
        "result": {"code": code, "description": description},
        "buildNumber": "abc123",
        "timestamp": "2024-01-15 10:30:00.123+0000",
        "ndc": "8ac7a4c7_f3e1",
    }
    body.update(overrides)
    return body


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_handler() -> Callable[..., RecordingHandler]:
    def _make(*responses: httpx.Response | Exception) -> RecordingHandler:
        return RecordingHandler(list(responses))

    return _make


@pytest.fixture
def peach_config() -> dict:
    return {
        "entity_id": "test-entity-123",
        "username": "test-user",
        "password": "test-password",
        "environment": PeachEnvironment.SANDBOX,
    }


@pytest.fixture
def card_payment_request() -> PaymentRequest:
    return PaymentRequest(
        amount=Amount(value=Decimal("100.00"), currency=Currency.ZAR),
        customer=Customer(
            id="cust-42",
            email="thandi@paylens.co.za",
            first_name="Thandi",
            last_name="Nkosi",
        ),
        payment_method=PaymentMethod.CARD,
        card_details=CardDetails(
            number="4111111111111111",
            expiry_month="12",
            expiry_year="30",
            cvv="123",
            holder_name="T Nkosi",
        ),
    )
