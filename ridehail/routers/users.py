# ridehail/routers/users.py
from fastapi import APIRouter, Depends

from ..deps import get_current_user
from ..errors import Forbidden

router = APIRouter(tags=["users"])

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


# В записях пользователей лежит passwordHash, наружу их не отдаём никому.
# Имя/телефон доступны только через /customers/drivers/{id}/public и /drivers/customers/{id}/public.
@router.api_route("/users", methods=_ALL_METHODS)
@router.api_route("/users/{rest:path}", methods=_ALL_METHODS)
def api_users_forbidden(_=Depends(get_current_user)):
    raise Forbidden("Доступ запрещён")
