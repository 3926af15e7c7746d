from __future__ import annotations

import math

from ..models.driver import ComfortLevel

# тариф в BYN: посадка + за километр
TARIFFS: dict[ComfortLevel, tuple[float, float]] = {
    ComfortLevel.ECONOMY: (2.5, 0.95),
    ComfortLevel.COMFORT: (3.5, 1.35),
    ComfortLevel.BUSINESS: (5.5, 2.1),
}


def calculate_price_by_n(distance_meters: float, comfort: ComfortLevel) -> float:
    base, per_km = TARIFFS[comfort]
    km = distance_meters / 1000
    raw = base + km * per_km
    # до копеек, половина всегда вверх (round() округлил бы 3.355 до 3.35)
    return math.floor(raw * 100 + 0.5) / 100
