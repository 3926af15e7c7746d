# ridehail/services/driver_applications.py
from __future__ import annotations

import logging

from ..db import JsonStore
from ..errors import Conflict, NotFound, ValidationError
from ..models.base import new_id, utcnow
from ..models.driver import ApplicationStatus, Car, ComfortLevel, Driver, DriverApplication
from ..models.user import Manager, User, UserRole
from ..utils.payload import clean_str
from ..utils.security import hash_password

logger = logging.getLogger(__name__)

MIN_REJECT_COMMENT = 3


def submit(store: JsonStore, payload: dict) -> DriverApplication:
    """
    Анкета будущего водителя. Пользователя не создаём, только заявку в статусе pending.
    """
    email = clean_str(payload.get("email"))
    name = clean_str(payload.get("name"))
    phone = clean_str(payload.get("phone"))
    password = payload.get("password")
    if not (email and name and phone and isinstance(password, str) and password):
        raise ValidationError("Некорректные данные")

    with store.transaction() as db:
        if db.user_by_email(email, UserRole.DRIVER):
            raise Conflict("Водитель с таким email уже существует")

        # не больше одной заявки pending на email
        if any(a.email == email and a.status == ApplicationStatus.PENDING for a in db.driver_applications):
            raise Conflict("Заявка уже отправлена и ожидает рассмотрения")

        app = DriverApplication(
            id=new_id(),
            email=email,
            name=name,
            phone=phone,
            password_hash=hash_password(password),
            status=ApplicationStatus.PENDING,
            created_at=utcnow(),
        )
        db.driver_applications.append(app)

    logger.info("driver application %s submitted", app.id)
    return app


def list_applications(store: JsonStore, status: str | None = None) -> list[DriverApplication]:
    apps = store.read().driver_applications
    if status:
        apps = [a for a in apps if a.status.value == status]
    return apps


def get_application(store: JsonStore, app_id: str) -> DriverApplication:
    app = store.read().application_by_id(app_id)
    if not app:
        raise NotFound("Заявка не найдена")
    return app


def _parse_approval(payload: dict) -> tuple[str, Car, ComfortLevel]:
    license_number = clean_str(payload.get("driverLicenseNumber"))
    car = Car(
        make=clean_str(payload.get("carMake")),
        model=clean_str(payload.get("carModel")),
        color=clean_str(payload.get("carColor")),
        plate=clean_str(payload.get("carPlate")),
    )
    comfort_raw = clean_str(payload.get("comfortLevel"))
    if not (license_number and car.make and car.model and car.color and car.plate and comfort_raw):
        raise ValidationError("Некорректные данные")

    comfort = ComfortLevel.parse(comfort_raw)
    if comfort is None:
        raise ValidationError("Некорректный уровень комфорта")
    return license_number, car, comfort


def approve(store: JsonStore, app_id: str, manager: Manager, payload: dict) -> DriverApplication:
    """
    pending -> approved.
    В одной транзакции: пользователь role=driver (с хэшем пароля из заявки),
    профиль водителя (offline, без координат) и отметка в заявке.
    """
    license_number, car, comfort = _parse_approval(payload)

    with store.transaction() as db:
        app = db.application_by_id(app_id)
        if not app:
            raise NotFound("Заявка не найдена")
        if app.status != ApplicationStatus.PENDING:
            raise Conflict("Заявка уже рассмотрена")
        if db.user_by_email(app.email, UserRole.DRIVER):
            raise Conflict("Водитель с таким email уже существует")

        now = utcnow()
        user = User(
            id=new_id(),
            email=app.email,
            name=app.name,
            role=UserRole.DRIVER,
            phone=app.phone,
            password_hash=app.password_hash,
        )
        db.users.append(user)
        db.drivers.append(Driver(
            id=user.id,
            user_id=user.id,
            is_online=False,
            coords=None,
            comfort_level=comfort.value,
            driver_license_number=license_number,
            car=car,
            updated_at=now,
        ))

        app.status = ApplicationStatus.APPROVED
        app.reviewed_at = now
        app.driver_id = user.id
        app.reviewed_by_manager_id = manager.id
        # копия для аудита: что именно одобрил менеджер
        app.driver_license_number = license_number
        app.car = car.model_copy()
        app.comfort_level = comfort.value

    logger.info("application %s approved by manager %s, driver %s", app.id, manager.id, user.id)
    return app


def reject(store: JsonStore, app_id: str, manager: Manager, payload: dict) -> DriverApplication:
    comment = clean_str(payload.get("comment"))
    if not comment or len(comment) < MIN_REJECT_COMMENT:
        raise ValidationError("Укажите причину отказа (минимум 3 символа)")

    with store.transaction() as db:
        app = db.application_by_id(app_id)
        if not app:
            raise NotFound("Заявка не найдена")
        if app.status != ApplicationStatus.PENDING:
            raise Conflict("Заявка уже рассмотрена")

        app.status = ApplicationStatus.REJECTED
        app.reviewed_at = utcnow()
        app.reviewed_by_manager_id = manager.id
        app.manager_comment = comment

    logger.info("application %s rejected by manager %s", app.id, manager.id)
    return app
