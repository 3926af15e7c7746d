# ridehail/utils/payload.py
from __future__ import annotations

from typing import Any


def clean_str(value: Any) -> str | None:
    """Строка без пробелов по краям; пустое и не-строки -> None."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def is_number(value: Any) -> bool:
    # bool хоть и подкласс int, но координатой/дистанцией не считается
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_coords(value: Any) -> tuple[float, float] | None:
    """[lat, lon] -> (lat, lon) или None, если это не пара чисел в допустимых границах."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    lat, lon = value
    if not (is_number(lat) and is_number(lon)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return float(lat), float(lon)
