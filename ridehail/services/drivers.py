# ridehail/services/drivers.py
from __future__ import annotations

import logging

from ..db import Database, JsonStore
from ..errors import NotFound, ValidationError
from ..models.base import utcnow
from ..models.driver import Driver
from ..models.user import User
from ..utils.payload import is_number

logger = logging.getLogger(__name__)


def _record_or_404(db: Database, user: User, message: str = "Профиль водителя не найден") -> Driver:
    record = db.driver_for_user(user.id)
    if not record:
        raise NotFound(message)
    return record


def get_profile(store: JsonStore, user: User) -> Driver:
    return _record_or_404(store.read(), user)


def set_online(store: JsonStore, user: User, value: bool) -> Driver:
    """
    Выйти на линию / уйти с линии.
    Офлайн сбрасывает координаты.
    """
    with store.transaction() as db:
        record = _record_or_404(db, user)
        record.is_online = value
        if not value:
            record.coords = None
        record.updated_at = utcnow()

    logger.info("driver %s is %s", user.id, "online" if value else "offline")
    return record


def update_location(store: JsonStore, user: User, payload: dict) -> Driver:
    lat = payload.get("lat")
    lon = payload.get("lon")
    if not (is_number(lat) and is_number(lon)) or not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValidationError("Некорректные координаты")

    with store.transaction() as db:
        record = _record_or_404(db, user, "Профиль водителя не найден. Сначала выйди на линию.")
        record.coords = (float(lat), float(lon))
        record.updated_at = utcnow()
    return record
