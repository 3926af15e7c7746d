# ridehail/models/driver.py
from __future__ import annotations

import datetime as dt
import enum

from pydantic import BaseModel, ConfigDict

from .base import Record


class ComfortLevel(str, enum.Enum):
    ECONOMY = "economy"
    COMFORT = "comfort"
    BUSINESS = "business"

    @classmethod
    def parse(cls, raw) -> "ComfortLevel | None":
        value = str(raw or "").strip().lower()
        try:
            return cls(value)
        except ValueError:
            return None


class Car(BaseModel):
    model_config = ConfigDict(extra="allow")

    make: str | None = None
    model: str | None = None
    color: str | None = None
    plate: str | None = None


class Driver(Record):
    """Профиль водителя, 1:1 с пользователем role=driver (id совпадает с userId)."""

    id: str
    user_id: str
    is_online: bool = False
    coords: tuple[float, float] | None = None
    # строкой, а не ComfortLevel: сравниваем без учёта регистра
    comfort_level: str | None = None
    driver_license_number: str | None = None
    car: Car | None = None
    updated_at: dt.datetime | None = None

    def to_profile(self) -> dict:
        data = self.to_dict()
        keys = ("id", "userId", "comfortLevel", "car", "isOnline", "updatedAt")
        return {k: data.get(k) for k in keys}


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DriverApplication(Record):
    id: str
    email: str
    name: str
    phone: str
    password_hash: str | None = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    created_at: dt.datetime | None = None
    reviewed_at: dt.datetime | None = None
    driver_id: str | None = None

    # заполняются при рассмотрении
    reviewed_by_manager_id: str | None = None
    manager_comment: str | None = None
    driver_license_number: str | None = None
    car: Car | None = None
    comfort_level: str | None = None

    def without_secrets(self) -> dict:
        return self.to_dict(exclude={"password_hash"})
