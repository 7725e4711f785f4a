from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictInt
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartLineInput(_CamelModel):
    # Every field is optional here: missing values are judged by the amount validator,
    # which reports them as invalid line items rather than as a schema error.
    book_id: StrictInt | None = None
    quantity: StrictInt | None = None
    price: StrictInt | None = None


class PaymentConfirmRequest(_CamelModel):
    payment_key: str | None = None
    order_id: str | None = None
    amount: StrictInt | None = None
    items: list[CartLineInput] | None = None


class PaymentConfirmResponse(_CamelModel):
    order_id: str
    total_amount: int
    method: str | None = None
    status: str
    approved_at: str | None = None


class PaymentErrorBody(_CamelModel):
    error: str
    detail: str | None = None
    code: str | None = None
    message: str | None = None
