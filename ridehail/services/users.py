# ridehail/services/users.py
from __future__ import annotations

import logging

from ..db import JsonStore
from ..errors import Conflict, Unauthenticated, ValidationError
from ..models.base import new_id
from ..models.user import User, UserRole
from ..utils.payload import clean_str
from ..utils.security import create_jwt, hash_password, verify_password

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    # в токене только id, всё остальное читаем из хранилища
    return create_jwt({"userId": user.id})


def register_customer(store: JsonStore, payload: dict) -> User:
    email = clean_str(payload.get("email"))
    name = clean_str(payload.get("name"))
    phone = clean_str(payload.get("phone"))
    password = payload.get("password")
    if not (email and name and phone and isinstance(password, str) and password):
        raise ValidationError("Некорректные данные")

    with store.transaction() as db:
        # один email может быть и клиентом, и водителем: уникальность по паре (email, role)
        if db.user_by_email(email, UserRole.CUSTOMER):
            raise Conflict("Email уже занят")

        user = User(
            id=new_id(),
            email=email,
            name=name,
            role=UserRole.CUSTOMER,
            phone=phone,
            password_hash=hash_password(password),
        )
        db.users.append(user)

    logger.info("customer %s registered", user.id)
    return user


def authenticate(store: JsonStore, payload: dict) -> User:
    email = clean_str(payload.get("email"))
    password = payload.get("password")
    role_raw = clean_str(payload.get("role"))
    if not (email and role_raw and isinstance(password, str) and password):
        raise ValidationError("Некорректные данные")

    try:
        role = UserRole(role_raw)
    except ValueError:
        raise Unauthenticated("Неверный email или пароль")

    user = store.read().user_by_email(email, role)
    if not user:
        raise Unauthenticated("Неверный email или пароль")

    ok, new_hash = verify_password(password, user.password_hash)
    if not ok:
        raise Unauthenticated("Неверный email или пароль")

    if new_hash:
        # старый sha256 без соли, заменяем при удачном входе
        with store.transaction() as db:
            stored = db.user_by_id(user.id)
            if stored:
                stored.password_hash = new_hash
        logger.info("upgraded password hash for user %s", user.id)

    logger.info("user %s logged in as %s", user.id, role.value)
    return user
