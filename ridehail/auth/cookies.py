# ridehail/auth/cookies.py
from __future__ import annotations

from fastapi import Request, Response

from ..config import settings


def _is_secure(request: Request) -> bool:
    # TLS может терминироваться на прокси, тогда смотрим X-Forwarded-Proto
    if settings.COOKIE_SECURE:
        return True
    if request.url.scheme == "https":
        return True
    return request.headers.get("x-forwarded-proto", "").lower() == "https"


def set_auth_cookie(request: Request, response: Response, name: str, token: str) -> None:
    """Сессионная кука (без expires/max-age): HttpOnly, Path=/, SameSite=Lax."""
    response.set_cookie(
        key=name,
        value=token,
        httponly=True,
        path="/",
        samesite=settings.COOKIE_SAMESITE,
        secure=_is_secure(request),
    )


def clear_auth_cookie(request: Request, response: Response, name: str) -> None:
    response.set_cookie(
        key=name,
        value="",
        max_age=0,
        httponly=True,
        path="/",
        samesite=settings.COOKIE_SAMESITE,
        secure=_is_secure(request),
    )
