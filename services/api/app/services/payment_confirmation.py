"""Payment confirmation flow.

RECEIVED -> VALIDATING -> (REJECTED | PROVIDER_CONFIRMING)
         -> (PROVIDER_FAILED | PERSISTING) -> (PERSISTENCE_FAILED | COMPLETED)

Nothing is written before the provider approves, so a provider failure or timeout never
leaves a partial order behind.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from services.api.app.models.payment import CartLineInput, PaymentConfirmRequest
from services.api.app.services.amount_validator import AmountValidation, validate_payment_amount
from services.api.app.services.order_store import OrderPersistenceError, insert_order
from services.api.app.services.payment_base import (
    ConfirmResult,
    PaymentProvider,
    PaymentProviderTimeoutError,
)
from services.api.app.services.product_cache import ProductCache
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger("bookshop")

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 15.0


class ConfirmationState(str, Enum):
    RECEIVED = "RECEIVED"
    VALIDATING = "VALIDATING"
    REJECTED = "REJECTED"
    PROVIDER_CONFIRMING = "PROVIDER_CONFIRMING"
    PROVIDER_FAILED = "PROVIDER_FAILED"
    PERSISTING = "PERSISTING"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    COMPLETED = "COMPLETED"


class MalformedPaymentRequestError(Exception):
    """A required field is missing from the confirmation request."""


class PaymentAmountMismatchError(Exception):
    def __init__(self, validation: AmountValidation) -> None:
        super().__init__(validation.detail or "invalid payment amount")
        self.validation = validation


@dataclass(frozen=True, slots=True)
class ConfirmedOrder:
    order_id: str
    total_amount: int
    method: str | None
    status: str
    approved_at: str | None


def build_order_name(items: list[CartLineInput], cache: ProductCache) -> str:
    titles = []
    for item in items:
        product = cache.lookup(item.book_id) if item.book_id else None
        titles.append(product.title if product else f"Book #{item.book_id}")

    if len(titles) == 1:
        return titles[0]
    return f"{titles[0]} and {len(titles) - 1} more"


def _parse_approved_at(value: str | None) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning("Unparseable provider approvedAt=%r; using server time", value)
    return datetime.now(timezone.utc)


class PaymentConfirmation:
    def __init__(
        self,
        db: Session,
        provider: PaymentProvider,
        cache: ProductCache,
        *,
        user_id: str,
        provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        self._db = db
        self._provider = provider
        self._cache = cache
        self._user_id = user_id
        self._provider_timeout_seconds = provider_timeout_seconds
        self.state = ConfirmationState.RECEIVED

    def _transition(self, state: ConfirmationState) -> None:
        logger.debug(
            "payment confirmation user=%s %s -> %s", self._user_id, self.state.value, state.value
        )
        self.state = state

    async def run(self, request: PaymentConfirmRequest) -> ConfirmedOrder:
        if (
            not request.payment_key
            or not request.order_id
            or not request.amount
            or not request.items
        ):
            self._transition(ConfirmationState.REJECTED)
            raise MalformedPaymentRequestError(
                "paymentKey, orderId, amount and a non-empty items list are required"
            )

        payment_key: str = request.payment_key
        order_id: str = request.order_id
        amount: int = request.amount
        items: list[CartLineInput] = request.items

        self._transition(ConfirmationState.VALIDATING)
        validation = validate_payment_amount(items, amount, self._cache)
        if not validation.valid:
            self._transition(ConfirmationState.REJECTED)
            logger.warning(
                "Payment amount validation failed user=%s order=%s reason=%s detail=%s "
                "requested=%s computed=%s items=%s at=%s",
                self._user_id,
                order_id,
                validation.reason.value if validation.reason else None,
                validation.detail,
                amount,
                validation.computed_total,
                [item.model_dump(by_alias=True) for item in items],
                datetime.now(timezone.utc).isoformat(),
            )
            raise PaymentAmountMismatchError(validation)

        assert validation.computed_total is not None
        computed_total = validation.computed_total
        logger.info(
            "Payment amount validated user=%s order=%s amount=%s item_count=%s",
            self._user_id,
            order_id,
            computed_total,
            len(items),
        )

        self._transition(ConfirmationState.PROVIDER_CONFIRMING)
        try:
            result = await asyncio.wait_for(
                self._provider.confirm(payment_key, order_id, amount),
                timeout=self._provider_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            self._transition(ConfirmationState.PROVIDER_FAILED)
            logger.error(
                "Payment provider timed out provider=%s order=%s", self._provider.name, order_id
            )
            raise PaymentProviderTimeoutError(self._provider_timeout_seconds) from e
        except Exception as e:
            self._transition(ConfirmationState.PROVIDER_FAILED)
            logger.error(
                "Payment provider confirm failed provider=%s order=%s err=%s",
                self._provider.name,
                order_id,
                e,
            )
            raise

        self._transition(ConfirmationState.PERSISTING)
        try:
            # Blocking DB work runs off the event loop.
            await run_in_threadpool(self._persist, result, items, computed_total)
        except Exception:
            self._transition(ConfirmationState.PERSISTENCE_FAILED)
            raise

        self._transition(ConfirmationState.COMPLETED)
        logger.info(
            "Order recorded user=%s order=%s payment_key=%s total=%s status=%s",
            self._user_id,
            result.order_id,
            result.payment_key,
            result.total_amount,
            result.status,
        )
        return ConfirmedOrder(
            order_id=result.order_id,
            total_amount=result.total_amount,
            method=result.method,
            status=result.status,
            approved_at=result.approved_at,
        )

    def _persist(
        self, result: ConfirmResult, items: list[CartLineInput], computed_total: int
    ) -> None:
        # The provider has already captured the payment here; every failure below needs
        # manual reconciliation against the provider's references.
        if result.total_amount != computed_total:
            logger.error(
                "Provider total differs from computed total; order not recorded, reconcile "
                "manually user=%s order=%s payment_key=%s provider_total=%s computed=%s",
                self._user_id,
                result.order_id,
                result.payment_key,
                result.total_amount,
                computed_total,
            )
            raise OrderPersistenceError(
                result.order_id,
                result.payment_key,
                f"provider total {result.total_amount} != computed total {computed_total}",
            )

        try:
            insert_order(
                self._db,
                user_id=self._user_id,
                order_id=result.order_id,
                payment_key=result.payment_key,
                order_name=result.order_name or build_order_name(items, self._cache),
                total_amount=computed_total,
                status=result.status,
                method=result.method,
                items=[item.model_dump() for item in items],
                payment_response=result.raw,
                approved_at=_parse_approved_at(result.approved_at),
            )
        except Exception as e:
            logger.error(
                "Order persistence failed after provider approval; reconcile manually "
                "user=%s order=%s payment_key=%s total=%s err=%s",
                self._user_id,
                result.order_id,
                result.payment_key,
                result.total_amount,
                e,
            )
            raise
