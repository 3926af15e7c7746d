# ridehail/errors.py
from __future__ import annotations


class ServiceError(Exception):
    """Базовая ошибка сервисов; status_code уходит прямо в HTTP-ответ."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError, ValueError):
    status_code = 400


class Unauthenticated(ServiceError):
    status_code = 401


class Forbidden(ServiceError, PermissionError):
    status_code = 403


class NotFound(ServiceError, LookupError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409


class InternalMisconfiguration(ServiceError):
    status_code = 500


class StorageCorrupted(ServiceError):
    """Файл читается как JSON, но записи в нём не сходятся со схемой. Перезаписывать его нельзя."""

    status_code = 500
