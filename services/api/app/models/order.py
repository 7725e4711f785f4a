from __future__ import annotations

from packages.shared.schemas.order_v1 import OrderStatusV1
from pydantic import BaseModel, Field


class OrderItemOut(BaseModel):
    book_id: int | None = None
    quantity: int | None = None
    price: int | None = None


class OrderOut(BaseModel):
    id: int
    order_id: str
    order_name: str
    total_amount: int
    status: str
    method: str | None = None
    items: list[OrderItemOut] = Field(default_factory=list)
    created_at: str
    approved_at: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderOut]


class AdminOrderOut(OrderOut):
    user_id: str
    payment_key: str


class AdminOrderPage(BaseModel):
    orders: list[AdminOrderOut]
    page: int
    page_size: int
    total: int


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatusV1
