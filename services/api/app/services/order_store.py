from __future__ import annotations

from datetime import datetime
from typing import Any

from packages.shared.schemas.order_v1 import is_known_status
from services.api.app.db.models import Order
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

USER_ORDERS_LIMIT = 50
ADMIN_PAGE_SIZE_MAX = 100


class OrderStoreError(Exception):
    """Base class for order persistence errors."""


class DuplicateOrderError(OrderStoreError):
    def __init__(self, order_id: str, payment_key: str) -> None:
        super().__init__(
            f"Order already recorded for order_id={order_id!r} or payment_key={payment_key!r}"
        )
        self.order_id = order_id
        self.payment_key = payment_key


class OrderPersistenceError(OrderStoreError):
    def __init__(self, order_id: str, payment_key: str, reason: str) -> None:
        super().__init__(
            f"Failed to record order order_id={order_id!r} payment_key={payment_key!r}: {reason}"
        )
        self.order_id = order_id
        self.payment_key = payment_key
        self.reason = reason


class UnknownOrderStatusError(OrderStoreError):
    def __init__(self, status: str) -> None:
        super().__init__(f"Unknown order status: {status!r}")
        self.status = status


def insert_order(
    db: Session,
    *,
    user_id: str,
    order_id: str,
    payment_key: str,
    order_name: str,
    total_amount: int,
    status: str,
    method: str | None,
    items: list[dict[str, Any]],
    payment_response: dict[str, Any] | None,
    approved_at: datetime | None,
) -> Order:
    """Insert a finalized order in a single commit.

    A unique-constraint hit is reported as DuplicateOrderError and is never retried.
    """

    if not is_known_status(status):
        raise OrderPersistenceError(order_id, payment_key, f"unknown status {status!r}")

    order = Order(
        user_id=user_id,
        order_id=order_id,
        payment_key=payment_key,
        order_name=order_name,
        total_amount=total_amount,
        status=status,
        method=method,
        items_json=items,
        payment_response_json=payment_response,
        approved_at=approved_at,
    )
    db.add(order)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateOrderError(order_id, payment_key) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise OrderPersistenceError(order_id, payment_key, type(e).__name__) from e
    except Exception as e:
        # Driver-level failures (e.g. an integer the column type cannot bind) are not
        # wrapped by SQLAlchemy.
        db.rollback()
        raise OrderPersistenceError(order_id, payment_key, type(e).__name__) from e

    return order


def list_orders_for_user(db: Session, user_id: str, limit: int = USER_ORDERS_LIMIT) -> list[Order]:
    limit = max(1, min(limit, USER_ORDERS_LIMIT))
    return (
        db.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )


def list_orders(
    db: Session,
    *,
    page: int = 1,
    page_size: int = 20,
    status: str | None = None,
) -> tuple[list[Order], int]:
    page = max(1, page)
    page_size = max(1, min(page_size, ADMIN_PAGE_SIZE_MAX))

    query = db.query(Order)
    if status is not None:
        query = query.filter(Order.status == status)

    total = query.count()
    rows = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return rows, total


def get_order(db: Session, order_pk: int) -> Order | None:
    return db.get(Order, order_pk)


def update_order_status(db: Session, order_pk: int, status: str) -> Order | None:
    if not is_known_status(status):
        raise UnknownOrderStatusError(status)

    order = get_order(db, order_pk)
    if order is None:
        return None

    order.status = status
    db.commit()
    return order
