# ridehail/routers/manager.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from ..auth.cookies import clear_auth_cookie, set_auth_cookie
from ..config import settings
from ..db import JsonStore, get_store
from ..deps import get_current_manager
from ..errors import ValidationError
from ..models.user import Manager
from ..services import driver_applications, managers

router = APIRouter(prefix="/manager", tags=["manager"])


# ---------- Сессия менеджера ----------
@router.post("/login")
def api_manager_login(payload: dict, request: Request, response: Response, store: JsonStore = Depends(get_store)):
    manager = managers.authenticate(store, payload)
    set_auth_cookie(request, response, settings.MANAGER_COOKIE_NAME, managers.issue_token(manager))
    return {"manager": manager.to_public()}


@router.post("/logout")
def api_manager_logout(request: Request, response: Response):
    clear_auth_cookie(request, response, settings.MANAGER_COOKIE_NAME)
    return {"ok": True}


@router.get("/me")
def api_manager_me(manager: Manager = Depends(get_current_manager)):
    return manager.to_public()


# ---------- Заявки водителей ----------
@router.get("/driver-applications")
def api_list_applications(
    status: Optional[str] = Query(None),
    _: Manager = Depends(get_current_manager),
    store: JsonStore = Depends(get_store),
):
    return [a.without_secrets() for a in driver_applications.list_applications(store, status)]


@router.get("/driver-applications/{app_id}")
def api_get_application(
    app_id: str,
    _: Manager = Depends(get_current_manager),
    store: JsonStore = Depends(get_store),
):
    return driver_applications.get_application(store, app_id).without_secrets()


@router.patch("/driver-applications/{app_id}")
def api_review_application(
    app_id: str,
    payload: dict,
    manager: Manager = Depends(get_current_manager),
    store: JsonStore = Depends(get_store),
):
    """
    action=approve — создаёт водителя (пользователь + профиль), action=reject — отказ с причиной.
    """
    action = payload.get("action")
    if action == "approve":
        app = driver_applications.approve(store, app_id, manager, payload)
        return {"ok": True, "driverId": app.driver_id}
    if action == "reject":
        driver_applications.reject(store, app_id, manager, payload)
        return {"ok": True}
    raise ValidationError("Неизвестное действие")
