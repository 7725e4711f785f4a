import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from services.api.app.auth import get_current_user_id
from services.api.app.db.database import get_db
from services.api.app.models.payment import (
    PaymentConfirmRequest,
    PaymentConfirmResponse,
    PaymentErrorBody,
)
from services.api.app.rate_limit import limiter, payment_rate_limit
from services.api.app.services.order_store import DuplicateOrderError, OrderPersistenceError
from services.api.app.services.payment_base import PaymentProviderError
from services.api.app.services.payment_confirmation import (
    MalformedPaymentRequestError,
    PaymentAmountMismatchError,
    PaymentConfirmation,
)
from services.api.app.services.payment_factory import get_payment_provider
from services.api.app.services.product_cache import product_cache
from sqlalchemy.orm import Session

logger = logging.getLogger("bookshop")

router = APIRouter()


def _error(status_code: int, body: PaymentErrorBody) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _payment_error_response(e: Exception) -> JSONResponse:
    if isinstance(e, MalformedPaymentRequestError):
        return _error(400, PaymentErrorBody(error=str(e)))

    if isinstance(e, PaymentAmountMismatchError):
        return _error(
            400,
            PaymentErrorBody(
                error="invalid payment amount",
                detail=e.validation.detail,
                code=e.validation.reason.value if e.validation.reason else None,
            ),
        )

    if isinstance(e, PaymentProviderError):
        return _error(
            e.http_status,
            PaymentErrorBody(error="payment approval failed", code=e.code, message=e.message),
        )

    if isinstance(e, DuplicateOrderError):
        return _error(
            409, PaymentErrorBody(error="order already recorded", code="DUPLICATE_ORDER")
        )

    if isinstance(e, OrderPersistenceError):
        return _error(
            500,
            PaymentErrorBody(
                error="payment approved but the order could not be recorded",
                code="ORDER_PERSISTENCE_FAILED",
            ),
        )

    logger.exception("Unexpected payment confirmation error: %s", e)
    return _error(500, PaymentErrorBody(error="internal server error"))


@router.post(
    "/v1/payments/confirm",
    response_model=PaymentConfirmResponse,
    responses={
        400: {"model": PaymentErrorBody},
        409: {"model": PaymentErrorBody},
        429: {"model": PaymentErrorBody},
        500: {"model": PaymentErrorBody},
    },
)
@limiter.limit(payment_rate_limit)
async def confirm_payment(
    request: Request,
    payload: PaymentConfirmRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> PaymentConfirmResponse | JSONResponse:
    try:
        provider = get_payment_provider()
    except ValueError as e:
        logger.error("Payment provider misconfigured: %s", e)
        return _error(500, PaymentErrorBody(error="internal server error"))

    flow = PaymentConfirmation(db, provider, product_cache, user_id=user_id)
    try:
        confirmed = await flow.run(payload)
    except Exception as e:
        return _payment_error_response(e)

    return PaymentConfirmResponse(
        order_id=confirmed.order_id,
        total_amount=confirmed.total_amount,
        method=confirmed.method,
        status=confirmed.status,
        approved_at=confirmed.approved_at,
    )
