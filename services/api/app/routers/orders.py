from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from services.api.app.auth import get_current_user_id, require_admin
from services.api.app.db.database import get_db
from services.api.app.db.models import Order
from services.api.app.models.order import (
    AdminOrderOut,
    AdminOrderPage,
    OrderItemOut,
    OrderListResponse,
    OrderOut,
    OrderStatusUpdateRequest,
)
from services.api.app.services import order_store
from sqlalchemy.orm import Session

router = APIRouter()


def _order_fields(order: Order) -> dict:
    return {
        "id": order.id,
        "order_id": order.order_id,
        "order_name": order.order_name,
        "total_amount": order.total_amount,
        "status": order.status,
        "method": order.method,
        "items": [OrderItemOut(**item) for item in order.items_json or []],
        "created_at": order.created_at.isoformat(),
        "approved_at": order.approved_at.isoformat() if order.approved_at else None,
    }


def _admin_order_out(order: Order) -> AdminOrderOut:
    return AdminOrderOut(
        **_order_fields(order),
        user_id=order.user_id,
        payment_key=order.payment_key,
    )


@router.get("/v1/orders", response_model=OrderListResponse)
def list_my_orders(
    user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)
) -> OrderListResponse:
    rows = order_store.list_orders_for_user(db, user_id)
    return OrderListResponse(orders=[OrderOut(**_order_fields(o)) for o in rows])


@router.get(
    "/v1/admin/orders",
    response_model=AdminOrderPage,
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    page: int = 1,
    page_size: int = 20,
    status: str | None = None,
    db: Session = Depends(get_db),
) -> AdminOrderPage:
    rows, total = order_store.list_orders(db, page=page, page_size=page_size, status=status)
    return AdminOrderPage(
        orders=[_admin_order_out(o) for o in rows],
        page=max(1, page),
        page_size=max(1, min(page_size, order_store.ADMIN_PAGE_SIZE_MAX)),
        total=total,
    )


@router.patch(
    "/v1/admin/orders/{order_pk}/status",
    response_model=AdminOrderOut,
    dependencies=[Depends(require_admin)],
)
def change_order_status(
    order_pk: int, payload: OrderStatusUpdateRequest, db: Session = Depends(get_db)
) -> AdminOrderOut:
    order = order_store.update_order_status(db, order_pk, payload.status.value)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return _admin_order_out(order)
