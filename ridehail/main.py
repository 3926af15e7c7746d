# ridehail/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db import JsonStore
from .deps import AccessGuardMiddleware, ApiPrefixMiddleware, error_response
from .errors import ServiceError
from .services.managers import seed_manager

from .routers import (
    auth as auth_router,
    manager as manager_router,
    customers as customers_router,
    drivers as drivers_router,
    orders as orders_router,
    reviews as reviews_router,
    users as users_router,
)

logger = logging.getLogger(__name__)


def create_app(store: JsonStore | None = None) -> FastAPI:
    app = FastAPI(title="Ridehail API")
    app.state.store = store or JsonStore(settings.DB_PATH)

    # --- Middleware (последний добавленный будет самым внешним) ---
    app.add_middleware(AccessGuardMiddleware)
    app.add_middleware(ApiPrefixMiddleware)

    allowed_origins = (
        [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
        if settings.ALLOWED_ORIGINS
        else ["*"]
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # --- Ошибки: всегда {"message": ...} ---
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": "Некорректные данные"})

    # --- Роутеры ---
    app.include_router(auth_router.router)
    app.include_router(manager_router.router)
    app.include_router(customers_router.router)
    app.include_router(drivers_router.router)
    app.include_router(orders_router.router)
    app.include_router(reviews_router.router)
    app.include_router(users_router.router)

    # --- Инициализация хранилища ---
    @app.on_event("startup")
    def on_startup():
        app.state.store.ensure_exists()
        if settings.SEED_MANAGER_LOGIN and settings.SEED_MANAGER_PASSWORD:
            seed_manager(
                app.state.store,
                settings.SEED_MANAGER_LOGIN,
                settings.SEED_MANAGER_PASSWORD,
                settings.SEED_MANAGER_NAME,
            )
        logger.info("store: %s", app.state.store.path)

    return app


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = create_app()
