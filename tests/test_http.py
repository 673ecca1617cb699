"""
Tests for the HTTP transport.

Tests cover:
- Backoff schedule
- Retry on 5xx and connection failures, no retry on 4xx
- Error normalization into NetworkError
- Default and updated headers
"""

import logging

import httpx
import pytest

from paylens.core.exceptions import NetworkError
from paylens.core.http import HttpClient, is_retryable

BASE_URL = "https://gateway.test"


def make_client(handler, recording_sleep, retries=3, **kwargs) -> HttpClient:
    return HttpClient(
        BASE_URL,
        timeout=5.0,
        retries=retries,
        transport=httpx.MockTransport(handler),
        sleep=recording_sleep,
        **kwargs,
    )


class TestRetryDelay:
    async def test_exponential_backoff_capped_at_ten_seconds(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(500))
        client = make_client(handler, recording_sleep, retries=6)

        with pytest.raises(NetworkError):
            await client.get("/payments/1")

        assert handler.call_count == 6
        assert recording_sleep.delays == [1.0, 2.0, 4.0, 8.0, 10.0]

    async def test_retry_is_logged_as_warning(self, make_handler, recording_sleep, caplog):
        handler = make_handler(httpx.Response(503), httpx.Response(200, json={}))
        client = make_client(handler, recording_sleep)

        with caplog.at_level(logging.WARNING, logger="paylens.core.http"):
            await client.get("/payments/1")

        assert len(caplog.records) == 1
        message = caplog.records[0].getMessage()
        assert "GET /payments/1" in message
        assert "attempt 1/3" in message
        assert "status: 503" in message
        assert "retrying in 1.0s" in message

    def test_is_retryable(self):
        assert is_retryable(NetworkError("no response"))
        assert is_retryable(NetworkError("boom", status_code=500))
        assert is_retryable(NetworkError("boom", status_code=503))
        assert not is_retryable(NetworkError("nope", status_code=404))
        assert not is_retryable(NetworkError("nope", status_code=400))


class TestRetryPolicy:
    async def test_succeeds_after_two_server_errors(self, make_handler, recording_sleep):
        handler = make_handler(
            httpx.Response(500, json={"message": "upstream down"}),
            httpx.Response(500, json={"message": "upstream down"}),
            httpx.Response(200, json={"ok": True}),
        )
        client = make_client(handler, recording_sleep)

        result = await client.get("/payments/1")

        assert result == {"ok": True}
        assert handler.call_count == 3
        assert recording_sleep.delays == [1.0, 2.0]

    async def test_client_error_is_never_retried(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(404, json={"message": "Not found"}))
        client = make_client(handler, recording_sleep)

        with pytest.raises(NetworkError) as exc_info:
            await client.get("/payments/missing")

        assert handler.call_count == 1
        assert recording_sleep.delays == []
        assert exc_info.value.status_code == 404
        assert exc_info.value.response == {"message": "Not found"}
        assert str(exc_info.value) == "HTTP 404: Not found"

    async def test_exhausted_retries_surface_last_error(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(502, text="Bad gateway"))
        client = make_client(handler, recording_sleep)

        with pytest.raises(NetworkError) as exc_info:
            await client.post("/payments", {"amount": "1.00"})

        assert handler.call_count == 3
        assert recording_sleep.delays == [1.0, 2.0]
        assert exc_info.value.status_code == 502
        assert exc_info.value.response == "Bad gateway"

    async def test_connection_failure_is_retried_and_normalized(self, recording_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler, recording_sleep)

        with pytest.raises(NetworkError) as exc_info:
            await client.get("/payments/1")

        assert len(calls) == 3
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert str(exc_info.value) == "No response received from server"

    async def test_timeout_is_normalized(self, recording_sleep):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler, recording_sleep, retries=1)

        with pytest.raises(NetworkError) as exc_info:
            await client.get("/payments/1")

        assert recording_sleep.delays == []
        assert isinstance(exc_info.value.cause, httpx.TimeoutException)

    async def test_single_attempt_when_retries_is_one(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(500))
        client = make_client(handler, recording_sleep, retries=1)

        with pytest.raises(NetworkError):
            await client.delete("/payments/1")

        assert handler.call_count == 1
        assert recording_sleep.delays == []


class TestRequests:
    async def test_default_headers(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(200, json={}))
        client = make_client(handler, recording_sleep, headers={"Authorization": "Basic abc"})

        await client.post("/payments", {"amount": "1.00"})

        request = handler.requests[0]
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"].startswith("paylens-python/")
        assert request.headers["Authorization"] == "Basic abc"
        assert str(request.url) == f"{BASE_URL}/payments"

    async def test_update_headers(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(200, json={}))
        client = make_client(handler, recording_sleep)

        client.update_headers({"Authorization": "Bearer rotated"})
        await client.put("/payments/1", {"x": 1})

        assert handler.requests[0].headers["Authorization"] == "Bearer rotated"

    async def test_empty_body_returns_none(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(204))
        client = make_client(handler, recording_sleep)

        assert await client.patch("/payments/1", {"x": 1}) is None

    async def test_query_params(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(200, json={}))

        async with make_client(handler, recording_sleep) as client:
            await client.get("/payments/1", params={"entityId": "ent-1"})

        assert handler.requests[0].url.params["entityId"] == "ent-1"

    async def test_error_without_message_uses_reason_phrase(self, make_handler, recording_sleep):
        handler = make_handler(httpx.Response(401, json={"result": {"code": "800.300.401"}}))
        client = make_client(handler, recording_sleep)

        with pytest.raises(NetworkError, match="HTTP 401: Unauthorized"):
            await client.get("/payments/1")
