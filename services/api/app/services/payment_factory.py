from __future__ import annotations

import os

from services.api.app.services.payment_base import PaymentProvider
from services.api.app.services.payment_mock import MockPaymentProvider


def get_payment_provider() -> PaymentProvider:
    """Select a payment provider based on env vars.

    Defaults to the mock provider so tests and local dev never reach a real payment API
    unless explicitly configured.
    """

    mode = os.getenv("BOOKSHOP_PAYMENT_PROVIDER", "mock").strip().lower()

    if mode == "mock":
        return MockPaymentProvider()

    if mode == "toss":
        from services.api.app.services.payment_toss import TossPaymentProvider

        return TossPaymentProvider.from_env()

    raise ValueError(f"Unknown BOOKSHOP_PAYMENT_PROVIDER={mode!r}. Expected mock or toss.")
