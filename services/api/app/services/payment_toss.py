from __future__ import annotations

import os
from typing import Any

import httpx
from services.api.app.services.payment_base import (
    ConfirmResult,
    PaymentProviderError,
    PaymentProviderTimeoutError,
    PaymentProviderUnavailableError,
)

DEFAULT_BASE_URL = "https://api.tosspayments.com"
DEFAULT_TIMEOUT_SECONDS = 10.0


class TossPaymentProvider:
    """Toss Payments confirm API.

    Env vars:
    - TOSS_SECRET_KEY (required)
    - TOSS_API_BASE_URL (default: https://api.tosspayments.com)
    - BOOKSHOP_PAYMENT_TIMEOUT_SECONDS (default: 10)
    """

    name = "TOSS"

    def __init__(
        self,
        secret_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_env(cls) -> TossPaymentProvider:
        secret_key = os.getenv("TOSS_SECRET_KEY", "").strip()
        if not secret_key:
            raise ValueError("TOSS_SECRET_KEY is required when BOOKSHOP_PAYMENT_PROVIDER=toss")

        return cls(
            secret_key,
            base_url=os.getenv("TOSS_API_BASE_URL", DEFAULT_BASE_URL).strip(),
            timeout_seconds=float(
                os.getenv("BOOKSHOP_PAYMENT_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
            ),
        )

    async def confirm(self, payment_key: str, order_id: str, amount: int) -> ConfirmResult:
        url = f"{self._base_url}/v1/payments/confirm"
        body = {"paymentKey": payment_key, "orderId": order_id, "amount": amount}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                auth=httpx.BasicAuth(self._secret_key, ""),
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=body)
        except httpx.TimeoutException as e:
            raise PaymentProviderTimeoutError(self._timeout_seconds) from e
        except httpx.HTTPError as e:
            raise PaymentProviderUnavailableError(str(e) or type(e).__name__) from e

        payload = _json_or_empty(response)

        if response.status_code >= 400:
            raise PaymentProviderError(
                response.status_code,
                str(payload.get("code") or "UNKNOWN_PAYMENT_ERROR"),
                str(payload.get("message") or response.reason_phrase),
            )

        try:
            return ConfirmResult(
                order_id=payload["orderId"],
                payment_key=payload["paymentKey"],
                status=payload["status"],
                total_amount=int(payload["totalAmount"]),
                method=payload.get("method"),
                order_name=payload.get("orderName"),
                approved_at=payload.get("approvedAt"),
                raw=payload,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PaymentProviderError(
                502, "INVALID_PROVIDER_RESPONSE", f"Missing or malformed field: {e}"
            ) from e


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
