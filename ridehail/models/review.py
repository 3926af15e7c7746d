# ridehail/models/review.py
from __future__ import annotations

import datetime as dt

from .base import Record


class Review(Record):
    id: str
    order_id: str
    driver_id: str
    customer_id: str
    rating: int
    text: str | None = None
    created_at: dt.datetime | None = None
