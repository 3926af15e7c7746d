# ridehail/services/visibility.py
"""
Кто чьи данные видит.

Клиент видит водителя (имя, телефон, класс, авто), пока у них есть общий заказ,
который клиент не отменил. Водитель видит клиента только во время незавершённого общего заказа.
Записи пользователей напрямую не отдаём никогда, в них passwordHash.
"""
from __future__ import annotations

from ..db import JsonStore
from ..errors import Forbidden, NotFound
from ..models.order import OrderStatus
from ..models.user import User


def driver_public_for_customer(store: JsonStore, customer: User, driver_id: str) -> dict:
    db = store.read()
    linked = any(
        o.customer_id == customer.id
        and o.driver_id
        and o.driver_id == str(driver_id)
        and o.status != OrderStatus.CANCELED_BY_CUSTOMER
        for o in db.orders
    )
    if not linked:
        raise Forbidden("Доступ запрещён")

    driver_user = db.user_by_id(driver_id)
    if not driver_user:
        raise NotFound("Водитель не найден")

    record = db.driver_for_user(driver_user.id)
    return {
        "id": driver_user.id,
        "name": driver_user.name,
        "phone": driver_user.phone,
        "comfortLevel": record.comfort_level if record else None,
        "car": record.car.model_dump(mode="json") if record and record.car else None,
    }


def customer_public_for_driver(store: JsonStore, driver_user: User, customer_id: str) -> dict:
    db = store.read()
    linked = any(
        o.driver_id == driver_user.id
        and o.customer_id == str(customer_id)
        and not o.is_terminal
        for o in db.orders
    )
    if not linked:
        raise Forbidden("Доступ запрещён")

    customer = db.user_by_id(customer_id)
    if not customer:
        raise NotFound("Клиент не найден")
    return {"id": customer.id, "name": customer.name, "phone": customer.phone}
