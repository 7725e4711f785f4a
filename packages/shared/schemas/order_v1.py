"""Shared order schema (v1).

Order statuses mirror the payment provider's payment lifecycle. Administrators may move an
order between any of these; no transition graph is enforced.
"""

from __future__ import annotations

from enum import Enum


class OrderStatusV1(str, Enum):
    READY = "READY"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_FOR_DEPOSIT = "WAITING_FOR_DEPOSIT"
    DONE = "DONE"
    CANCELED = "CANCELED"
    PARTIAL_CANCELED = "PARTIAL_CANCELED"
    ABORTED = "ABORTED"
    EXPIRED = "EXPIRED"


def is_known_status(value: str | None) -> bool:
    return value in {s.value for s in OrderStatusV1}
