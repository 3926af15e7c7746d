# ridehail/deps.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from .config import settings
from .db import JsonStore
from .errors import Forbidden, InternalMisconfiguration, ServiceError, Unauthenticated
from .models.user import MANAGER_ROLE, Manager, User, UserRole
from .utils.security import decode_jwt


def error_response(exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


# ------------------ Таблица доступа ------------------

CUSTOMER = UserRole.CUSTOMER.value
DRIVER = UserRole.DRIVER.value


@dataclass(frozen=True)
class RouteRule:
    prefix: str
    roles: frozenset[str]

    def matches(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")

    @property
    def for_manager(self) -> bool:
        return MANAGER_ROLE in self.roles


def _rule(prefix: str, *roles: str) -> RouteRule:
    return RouteRule(prefix, frozenset(roles))


# первое совпадение побеждает; всё, чего нет в таблице, публичное
PROTECTED_ROUTES: tuple[RouteRule, ...] = (
    _rule("/auth/me", CUSTOMER, DRIVER),
    _rule("/users", CUSTOMER, DRIVER),
    _rule("/customers", CUSTOMER),
    _rule("/drivers", DRIVER),
    _rule("/orders", CUSTOMER),
    _rule("/reviews", CUSTOMER),
    _rule("/manager/me", MANAGER_ROLE),
    _rule("/manager/driver-applications", MANAGER_ROLE),
)


def find_rule(path: str) -> Optional[RouteRule]:
    for rule in PROTECTED_ROUTES:
        if rule.matches(path):
            return rule
    return None


@dataclass
class Principal:
    id: str
    role: str
    record: User | Manager


# ------------------ Разрешение личности ------------------

def resolve_principal(store: JsonStore, rule: RouteRule, cookies: dict) -> Principal:
    """
    Кука → JWT → запись в хранилище → проверка роли.
    Нет/битый токен или пропавшая запись — 401, чужая роль — 403.
    """
    cookie_name = settings.MANAGER_COOKIE_NAME if rule.for_manager else settings.COOKIE_NAME
    token = cookies.get(cookie_name)
    if not token:
        raise Unauthenticated("Не авторизован")

    claims = decode_jwt(token)
    if not claims:
        raise Unauthenticated("Не авторизован")

    db = store.read()
    if rule.for_manager:
        manager = db.manager_by_id(claims.get("managerId")) if claims.get("managerId") else None
        if not manager:
            raise Unauthenticated("Менеджер не найден")
        return Principal(id=manager.id, role=MANAGER_ROLE, record=manager)

    user = db.user_by_id(claims.get("userId")) if claims.get("userId") else None
    if not user:
        raise Unauthenticated("Пользователь не найден")
    if user.role.value not in rule.roles:
        raise Forbidden("Недостаточно прав")
    return Principal(id=user.id, role=user.role.value, record=user)


class AccessGuardMiddleware(BaseHTTPMiddleware):
    """Пускает к защищённым префиксам только с валидной кукой и подходящей ролью."""

    async def dispatch(self, request: Request, call_next):
        rule = find_rule(request.scope["path"])
        if rule is None or request.method == "OPTIONS":
            return await call_next(request)

        store: JsonStore = request.app.state.store
        try:
            principal = await run_in_threadpool(resolve_principal, store, rule, request.cookies)
        except ServiceError as e:
            return error_response(e)

        request.state.principal = principal
        request.state.principal_id = principal.id
        return await call_next(request)


class ApiPrefixMiddleware:
    """/api/orders и /orders — один и тот же маршрут."""

    def __init__(self, app: ASGIApp, prefix: str = "/api"):
        self.app = app
        self.prefix = prefix

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            path = scope["path"]
            if path == self.prefix or path.startswith(self.prefix + "/"):
                scope = dict(scope)
                scope["path"] = path[len(self.prefix):] or "/"
                if scope.get("raw_path"):
                    scope["raw_path"] = scope["path"].encode("utf-8")
        await self.app(scope, receive, send)


# ------------------ Зависимости для роутеров ------------------

def _principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise InternalMisconfiguration(
            "AccessGuardMiddleware не установил principal. Проверь таблицу PROTECTED_ROUTES"
        )
    return principal


def get_current_user(request: Request) -> User:
    principal = _principal(request)
    if principal.role == MANAGER_ROLE:
        raise InternalMisconfiguration("Маршрут пользователя защищён как менеджерский")
    return principal.record


def get_current_manager(request: Request) -> Manager:
    principal = _principal(request)
    if principal.role != MANAGER_ROLE:
        raise InternalMisconfiguration("Маршрут менеджера защищён как пользовательский")
    return principal.record

