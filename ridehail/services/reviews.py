# ridehail/services/reviews.py
from __future__ import annotations

import datetime as dt
import logging

from ..db import JsonStore
from ..errors import Conflict, Forbidden, NotFound, ValidationError
from ..models.base import new_id, utcnow
from ..models.order import OrderStatus
from ..models.review import Review
from ..models.user import User
from ..utils.payload import is_number

logger = logging.getLogger(__name__)

_EPOCH = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


def create(store: JsonStore, customer: User, payload: dict) -> Review:
    """
    Отзыв о поездке. Только на свой завершённый заказ и только один раз.
    driverId и customerId берём из заказа и сессии, а не из тела запроса.
    """
    order_id = payload.get("orderId")
    rating = payload.get("rating")
    text = payload.get("text")
    if order_id is None or isinstance(order_id, bool) or not isinstance(order_id, (str, int)):
        raise ValidationError("Некорректные данные")
    if not is_number(rating) or not 1 <= rating <= 5 or int(rating) != rating:
        raise ValidationError("Оценка должна быть от 1 до 5")
    if text is not None and not isinstance(text, str):
        raise ValidationError("Некорректный текст отзыва")

    with store.transaction() as db:
        order = db.order_by_id(order_id)
        if not order:
            raise NotFound("Заказ не найден")
        if order.customer_id != customer.id:
            raise Forbidden("Это не ваш заказ")
        if order.status != OrderStatus.FINISHED or not order.driver_id:
            raise Conflict("Отзыв можно оставить только после завершения поездки")
        if db.review_for(order.id, customer_id=customer.id):
            raise Conflict("Отзыв на эту поездку уже оставлен")

        review = Review(
            id=new_id(),
            order_id=order.id,
            driver_id=order.driver_id,
            customer_id=customer.id,
            rating=int(rating),
            text=(text or "").strip() or None,
            created_at=utcnow(),
        )
        db.reviews.append(review)

    logger.info("review %s for order %s (rating %s)", review.id, order.id, review.rating)
    return review


def summary_for_driver(store: JsonStore, driver_user: User) -> dict:
    """Отзывы о водителе (новые сверху) + средняя оценка; к каждому имя клиента."""
    db = store.read()
    reviews = sorted(
        (r for r in db.reviews if r.driver_id == driver_user.id),
        key=lambda r: r.created_at or _EPOCH,
        reverse=True,
    )

    items = []
    for r in reviews:
        customer = db.user_by_id(r.customer_id)
        items.append({**r.to_dict(), "customerName": customer.name if customer else None})

    total = len(items)
    average = sum(r.rating for r in reviews) / total if total else 0
    return {"averageRating": average, "totalReviews": total, "reviews": items}
