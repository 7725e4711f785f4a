from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest
from services.api.app.services.payment_base import (
    PaymentProviderError,
    PaymentProviderTimeoutError,
    PaymentProviderUnavailableError,
)
from services.api.app.services.payment_toss import TossPaymentProvider


def _provider(handler) -> TossPaymentProvider:
    return TossPaymentProvider(
        "test_sk_123",
        base_url="https://toss.test",
        timeout_seconds=3,
        transport=httpx.MockTransport(handler),
    )


def test_confirm_posts_body_with_basic_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "paymentKey": "pk-1",
                "orderId": "order-1",
                "orderName": "Demian",
                "status": "DONE",
                "method": "카드",
                "totalAmount": 11100,
                "approvedAt": "2026-01-02T03:04:05+09:00",
            },
        )

    result = asyncio.run(_provider(handler).confirm("pk-1", "order-1", 11100))

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://toss.test/v1/payments/confirm"
    expected_auth = "Basic " + base64.b64encode(b"test_sk_123:").decode()
    assert request.headers["Authorization"] == expected_auth
    assert json.loads(request.content) == {
        "paymentKey": "pk-1",
        "orderId": "order-1",
        "amount": 11100,
    }

    assert result.status == "DONE"
    assert result.total_amount == 11100
    assert result.order_name == "Demian"
    assert result.raw["method"] == "카드"


def test_confirm_surfaces_provider_error_verbatim() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"code": "ALREADY_PROCESSED_PAYMENT", "message": "Payment already processed"},
        )

    with pytest.raises(PaymentProviderError) as exc_info:
        asyncio.run(_provider(handler).confirm("pk-1", "order-1", 11100))

    assert exc_info.value.http_status == 400
    assert exc_info.value.code == "ALREADY_PROCESSED_PAYMENT"
    assert exc_info.value.message == "Payment already processed"


def test_confirm_non_json_error_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="<html>maintenance</html>")

    with pytest.raises(PaymentProviderError) as exc_info:
        asyncio.run(_provider(handler).confirm("pk-1", "order-1", 11100))

    assert exc_info.value.http_status == 503
    assert exc_info.value.code == "UNKNOWN_PAYMENT_ERROR"


def test_confirm_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(PaymentProviderTimeoutError) as exc_info:
        asyncio.run(_provider(handler).confirm("pk-1", "order-1", 11100))

    assert exc_info.value.http_status == 504


def test_confirm_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PaymentProviderUnavailableError):
        asyncio.run(_provider(handler).confirm("pk-1", "order-1", 11100))


def test_confirm_rejects_incomplete_success_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "DONE"})

    with pytest.raises(PaymentProviderError) as exc_info:
        asyncio.run(_provider(handler).confirm("pk-1", "order-1", 11100))

    assert exc_info.value.code == "INVALID_PROVIDER_RESPONSE"


def test_from_env_requires_secret_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TOSS_SECRET_KEY", raising=False)

    with pytest.raises(ValueError, match="TOSS_SECRET_KEY"):
        TossPaymentProvider.from_env()
