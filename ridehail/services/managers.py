# ridehail/services/managers.py
from __future__ import annotations

import logging

from ..db import JsonStore
from ..errors import Unauthenticated, ValidationError
from ..models.base import new_id
from ..models.user import Manager
from ..utils.payload import clean_str
from ..utils.security import create_jwt, hash_password, verify_password

logger = logging.getLogger(__name__)


def issue_token(manager: Manager) -> str:
    return create_jwt({"managerId": manager.id})


def _check_password(manager: Manager, password: str) -> tuple[bool, str | None]:
    """
    Менеджеры — сид-данные: пароль лежит либо хэшем (passwordHash),
    либо открытым текстом (password). Открытый текст заменяем хэшем при первом входе.
    """
    if manager.password_hash:
        return verify_password(password, manager.password_hash)
    if manager.password is not None and manager.password == password:
        return True, hash_password(password)
    return False, None


def authenticate(store: JsonStore, payload: dict) -> Manager:
    login = clean_str(payload.get("login"))
    password = payload.get("password")
    if not (login and isinstance(password, str) and password):
        raise ValidationError("Некорректные данные")

    manager = store.read().manager_by_login(login)
    if not manager:
        raise Unauthenticated("Неверный логин или пароль")

    ok, new_hash = _check_password(manager, password)
    if not ok:
        raise Unauthenticated("Неверный логин или пароль")

    if new_hash:
        with store.transaction() as db:
            stored = db.manager_by_id(manager.id)
            if stored:
                stored.password_hash = new_hash
                stored.password = None
        logger.info("upgraded password hash for manager %s", manager.id)

    logger.info("manager %s logged in", manager.id)
    return manager


def seed_manager(store: JsonStore, login: str, password: str, name: str | None = None) -> Manager:
    """Создаёт менеджера, если такого логина ещё нет (вызывается при старте)."""
    with store.transaction() as db:
        existing = db.manager_by_login(login)
        if existing:
            return existing
        manager = Manager(
            id=new_id(),
            login=login,
            name=name or login,
            password_hash=hash_password(password),
        )
        db.managers.append(manager)

    logger.info("seeded manager %s", login)
    return manager
