# ridehail/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from ..auth.cookies import clear_auth_cookie, set_auth_cookie
from ..config import settings
from ..db import JsonStore, get_store
from ..deps import get_current_user
from ..models.user import User
from ..services import driver_applications, users

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def api_login(payload: dict, request: Request, response: Response, store: JsonStore = Depends(get_store)):
    user = users.authenticate(store, payload)
    set_auth_cookie(request, response, settings.COOKIE_NAME, users.issue_token(user))
    return {"user": user.to_public()}


@router.post("/register/customer")
def api_register_customer(
    payload: dict, request: Request, response: Response, store: JsonStore = Depends(get_store)
):
    user = users.register_customer(store, payload)
    set_auth_cookie(request, response, settings.COOKIE_NAME, users.issue_token(user))
    return {"user": user.to_public()}


@router.post("/driver-applications")
def api_submit_driver_application(payload: dict, store: JsonStore = Depends(get_store)):
    """Водитель не регистрируется сам, он подаёт заявку, пользователя создаст менеджер."""
    driver_applications.submit(store, payload)
    return {"ok": True}


@router.post("/logout")
def api_logout(request: Request, response: Response):
    clear_auth_cookie(request, response, settings.COOKIE_NAME)
    return {"ok": True}


@router.get("/me")
def api_me(user: User = Depends(get_current_user)):
    return user.to_public()
