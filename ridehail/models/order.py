# ridehail/models/order.py
from __future__ import annotations

import datetime as dt
import enum

from .base import Record


class OrderStatus(str, enum.Enum):
    SEARCHING_DRIVER = "searching_driver"
    ACCEPTED = "accepted"
    ARRIVED = "arrived"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    CANCELED_BY_CUSTOMER = "canceled_by_customer"


# дальше этих статусов заказ не двигается
TERMINAL_STATUSES = frozenset({OrderStatus.FINISHED, OrderStatus.CANCELED_BY_CUSTOMER})


class Order(Record):
    id: str
    customer_id: str
    driver_id: str | None = None
    from_address: str | None = None
    to_address: str | None = None
    from_coords: tuple[float, float]
    to_coords: tuple[float, float]
    comfort_type: str
    distance_meters: float
    duration_seconds: float
    price_by_n: float
    status: OrderStatus = OrderStatus.SEARCHING_DRIVER
    created_at: dt.datetime | None = None
    accepted_at: dt.datetime | None = None
    canceled_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
