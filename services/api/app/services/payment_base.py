from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


class PaymentProviderError(Exception):
    """The provider refused or could not complete a confirmation.

    Carries the provider's own HTTP status, error code and message so they can be surfaced
    to the caller unchanged.
    """

    def __init__(self, http_status: int, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.http_status = http_status
        self.code = code
        self.message = message


class PaymentProviderTimeoutError(PaymentProviderError):
    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            504,
            "PROVIDER_TIMEOUT",
            f"Payment provider did not respond within {timeout_seconds:g}s",
        )
        self.timeout_seconds = timeout_seconds


class PaymentProviderUnavailableError(PaymentProviderError):
    def __init__(self, reason: str) -> None:
        super().__init__(502, "PROVIDER_UNAVAILABLE", f"Payment provider unreachable: {reason}")


@dataclass(frozen=True, slots=True)
class ConfirmResult:
    order_id: str
    payment_key: str
    status: str
    total_amount: int
    method: str | None = None
    order_name: str | None = None
    approved_at: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


class PaymentProvider(Protocol):
    name: str

    async def confirm(self, payment_key: str, order_id: str, amount: int) -> ConfirmResult: ...
