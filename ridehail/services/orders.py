# ridehail/services/orders.py
from __future__ import annotations

import datetime as dt
import logging

from ..db import Database, JsonStore
from ..errors import Conflict, Forbidden, NotFound, ValidationError
from ..models.base import new_id, utcnow
from ..models.driver import ComfortLevel
from ..models.order import Order, OrderStatus
from ..models.user import User
from ..utils.payload import is_number, parse_coords
from .pricing import calculate_price_by_n

logger = logging.getLogger(__name__)

# Разрешённые переходы статусов, которые делает водитель
_ALLOWED = {
    OrderStatus.ACCEPTED: OrderStatus.ARRIVED,
    OrderStatus.ARRIVED: OrderStatus.IN_PROGRESS,
    OrderStatus.IN_PROGRESS: OrderStatus.FINISHED,
}

_EPOCH = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


def can_driver_set_status(current: OrderStatus, next_status: OrderStatus) -> bool:
    return _ALLOWED.get(current) == next_status


def _newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: o.created_at or _EPOCH, reverse=True)


def _order_or_404(db: Database, order_id: str) -> Order:
    order = db.order_by_id(order_id)
    if not order:
        raise NotFound("Заказ не найден")
    return order


# ---------- клиент ----------

def create(store: JsonStore, customer: User, payload: dict) -> Order:
    """
    Новый заказ всегда в searching_driver.
    customerId берём из сессии; цену доверяем клиенту, а если её нет, считаем по тарифу.
    """
    from_coords = parse_coords(payload.get("fromCoords"))
    to_coords = parse_coords(payload.get("toCoords"))
    comfort = ComfortLevel.parse(payload.get("comfortType"))
    distance = payload.get("distanceMeters")
    duration = payload.get("durationSeconds")
    if from_coords is None or to_coords is None or comfort is None:
        raise ValidationError("Некорректные данные заказа")
    if not (is_number(distance) and distance >= 0 and is_number(duration) and duration >= 0):
        raise ValidationError("Некорректные данные заказа")

    price = payload.get("priceByN")
    if price is None:
        price = calculate_price_by_n(distance, comfort)
    elif not is_number(price) or price < 0:
        raise ValidationError("Некорректная цена")

    addresses = {}
    for key, field in (("fromAddress", "from_address"), ("toAddress", "to_address")):
        value = payload.get(key)
        if value is not None and not isinstance(value, str):
            raise ValidationError("Некорректный адрес")
        addresses[field] = (value or "").strip() or None

    order = Order(
        id=new_id(),
        customer_id=customer.id,
        driver_id=None,
        from_coords=from_coords,
        to_coords=to_coords,
        comfort_type=comfort.value,
        distance_meters=distance,
        duration_seconds=duration,
        price_by_n=price,
        status=OrderStatus.SEARCHING_DRIVER,
        created_at=utcnow(),
        **addresses,
    )
    with store.transaction() as db:
        db.orders.append(order)

    logger.info("order %s created by customer %s (%s)", order.id, customer.id, order.comfort_type)
    return order


def cancel(store: JsonStore, order_id: str, customer: User) -> Order:
    """Отменить можно только свой заказ и только пока ищем водителя."""
    with store.transaction() as db:
        order = _order_or_404(db, order_id)
        if order.customer_id != customer.id:
            raise Forbidden("Это не ваш заказ")
        if order.status != OrderStatus.SEARCHING_DRIVER:
            raise Conflict("Нельзя отменить заказ на этом этапе")

        now = utcnow()
        order.status = OrderStatus.CANCELED_BY_CUSTOMER
        order.canceled_at = now
        order.updated_at = now

    logger.info("order %s canceled by customer %s", order.id, customer.id)
    return order


def current_for_customer(store: JsonStore, customer: User) -> Order | None:
    """
    Последний незавершённый заказ клиента.
    Если такого нет, последний finished без отзыва, чтобы UI показал форму отзыва и после перезагрузки.
    """
    db = store.read()
    mine = [o for o in db.orders if o.customer_id == customer.id]

    active = [o for o in mine if not o.is_terminal]
    if active:
        return active[-1]

    finished = [o for o in mine if o.status == OrderStatus.FINISHED]
    if not finished:
        return None
    last = finished[-1]
    if db.review_for(last.id, customer_id=customer.id):
        return None
    return last


def history_for_customer(store: JsonStore, customer: User) -> list[dict]:
    db = store.read()
    orders = _newest_first([o for o in db.orders if o.customer_id == customer.id])
    items = []
    for o in orders:
        review = db.review_for(o.id, customer_id=customer.id)
        items.append({"order": o.to_dict(), "review": review.to_dict() if review else None})
    return items


# ---------- водитель ----------

def available_for_driver(store: JsonStore, driver_user: User) -> list[Order]:
    """Свободные заказы под класс авто водителя; без класса пусто."""
    db = store.read()
    record = db.driver_for_user(driver_user.id)
    comfort = str(record.comfort_level or "").strip().lower() if record else ""
    if not comfort:
        return []

    return [
        o for o in db.orders
        if o.status == OrderStatus.SEARCHING_DRIVER
        and not o.driver_id
        and str(o.comfort_type or "").lower() == comfort
    ]


def current_for_driver(store: JsonStore, driver_user: User) -> Order | None:
    db = store.read()
    return next(
        (o for o in db.orders if o.driver_id == driver_user.id and not o.is_terminal),
        None,
    )


def history_for_driver(store: JsonStore, driver_user: User) -> list[dict]:
    db = store.read()
    orders = _newest_first([
        o for o in db.orders
        if o.driver_id == driver_user.id and o.status == OrderStatus.FINISHED
    ])
    items = []
    for o in orders:
        review = db.review_for(o.id, driver_id=driver_user.id)
        items.append({"order": o.to_dict(), "review": review.to_dict() if review else None})
    return items


def accept(store: JsonStore, order_id: str, driver_user: User) -> Order:
    """
    Первый, кто взял, получил заказ.
    Проверка (status, driverId) и запись идут в одной транзакции хранилища,
    так что второй водитель увидит уже принятый заказ и получит 409.
    """
    with store.transaction() as db:
        order = _order_or_404(db, order_id)
        if order.status != OrderStatus.SEARCHING_DRIVER or order.driver_id:
            raise Conflict("Заказ уже принят другим водителем")

        now = utcnow()
        order.status = OrderStatus.ACCEPTED
        order.driver_id = driver_user.id
        order.accepted_at = now
        order.updated_at = now

    logger.info("order %s accepted by driver %s", order.id, driver_user.id)
    return order


def set_status(store: JsonStore, order_id: str, driver_user: User, raw_status) -> Order:
    with store.transaction() as db:
        order = _order_or_404(db, order_id)
        if order.driver_id != driver_user.id:
            raise Forbidden("Это не ваш заказ")
        if not isinstance(raw_status, str):
            raise ValidationError("Некорректный статус")

        try:
            next_status = OrderStatus(raw_status)
        except ValueError:
            # неизвестный статус тоже недопустимый переход
            raise Conflict("Нельзя перевести заказ в этот статус")
        if not can_driver_set_status(order.status, next_status):
            raise Conflict("Нельзя перевести заказ в этот статус")

        previous = order.status
        order.status = next_status
        order.updated_at = utcnow()

    logger.info("order %s: %s -> %s by driver %s", order.id, previous.value, next_status.value, driver_user.id)
    return order
