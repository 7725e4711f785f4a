from __future__ import annotations

from datetime import datetime, timezone

from services.api.app.services.payment_base import ConfirmResult, PaymentProviderError


class MockPaymentProvider:
    """Deterministic provider for local dev and tests.

    Approves every confirmation except payment keys starting with ``fail_``, which are
    rejected the way a declined card would be.
    """

    name = "MOCK"

    async def confirm(self, payment_key: str, order_id: str, amount: int) -> ConfirmResult:
        if payment_key.startswith("fail_"):
            raise PaymentProviderError(
                400, "REJECT_CARD_PAYMENT", "The card was declined by the issuer"
            )

        approved_at = datetime.now(timezone.utc).isoformat()
        raw = {
            "paymentKey": payment_key,
            "orderId": order_id,
            "status": "DONE",
            "method": "CARD",
            "totalAmount": amount,
            "approvedAt": approved_at,
        }
        return ConfirmResult(
            order_id=order_id,
            payment_key=payment_key,
            status="DONE",
            total_amount=amount,
            method="CARD",
            order_name=None,
            approved_at=approved_at,
            raw=raw,
        )
