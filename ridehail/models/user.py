# ridehail/models/user.py
from __future__ import annotations

import enum

from .base import Record


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"


# роль менеджера живёт только в таблице доступа: менеджеры хранятся отдельно
MANAGER_ROLE = "manager"


class User(Record):
    id: str
    email: str
    name: str
    role: UserRole
    phone: str
    password_hash: str | None = None

    def to_public(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "phone": self.phone,
        }


class Manager(Record):
    id: str
    login: str
    name: str | None = None
    password_hash: str | None = None
    # в сид-данных пароль может лежать открытым текстом
    password: str | None = None

    def to_public(self) -> dict:
        return {"id": self.id, "login": self.login, "name": self.name}
