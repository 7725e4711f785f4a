"""Server-side recomputation of an order total.

Client-submitted prices and totals are untrusted. Every comparison is exact: amounts are
integer minor units, so any difference is treated as tampering rather than rounding.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from services.api.app.models.payment import CartLineInput
from services.api.app.services.product_cache import ProductCache

FREE_SHIPPING_THRESHOLD = 30000
SHIPPING_FEE = 3000


class RejectionReason(str, Enum):
    EMPTY_ITEMS = "EMPTY_ITEMS"
    INVALID_LINE_ITEM = "INVALID_LINE_ITEM"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRICE_MISMATCH = "PRICE_MISMATCH"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"


@dataclass(frozen=True, slots=True)
class AmountValidation:
    valid: bool
    computed_total: int | None = None
    reason: RejectionReason | None = None
    detail: str | None = None

    @classmethod
    def ok(cls, computed_total: int) -> AmountValidation:
        return cls(valid=True, computed_total=computed_total)

    @classmethod
    def rejected(
        cls, reason: RejectionReason, detail: str, computed_total: int | None = None
    ) -> AmountValidation:
        return cls(valid=False, computed_total=computed_total, reason=reason, detail=detail)


def shipping_fee_for(subtotal: int) -> int:
    return 0 if subtotal >= FREE_SHIPPING_THRESHOLD else SHIPPING_FEE


def validate_payment_amount(
    items: Sequence[CartLineInput] | None,
    claimed_total: int | None,
    cache: ProductCache,
) -> AmountValidation:
    if not items:
        return AmountValidation.rejected(RejectionReason.EMPTY_ITEMS, "no order items")

    subtotal = 0
    for item in items:
        # Zero is not a valid id or quantity either.
        if not item.book_id or not item.quantity or item.quantity <= 0:
            return AmountValidation.rejected(
                RejectionReason.INVALID_LINE_ITEM, "invalid line item"
            )

        product = cache.lookup(item.book_id)
        if product is None:
            return AmountValidation.rejected(
                RejectionReason.PRODUCT_NOT_FOUND,
                f"product does not exist (id: {item.book_id})",
            )

        if item.price != product.price:
            return AmountValidation.rejected(
                RejectionReason.PRICE_MISMATCH,
                f'price mismatch for "{product.title}" '
                f"(server: {product.price}, client: {item.price})",
            )

        subtotal += product.price * item.quantity

    computed_total = subtotal + shipping_fee_for(subtotal)

    if computed_total != claimed_total:
        return AmountValidation.rejected(
            RejectionReason.AMOUNT_MISMATCH,
            f"payment amount mismatch (computed: {computed_total}, requested: {claimed_total})",
            computed_total=computed_total,
        )

    return AmountValidation.ok(computed_total)
