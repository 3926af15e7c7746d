# ridehail/db.py
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError
from pydantic.alias_generators import to_camel

from .errors import StorageCorrupted
from .models.base import utcnow
from .models.driver import Driver, DriverApplication
from .models.order import Order
from .models.review import Review
from .models.user import Manager, User, UserRole

logger = logging.getLogger(__name__)


# ---------- Документ ----------
class Database(BaseModel):
    """Весь JSON-файл целиком: верхнеуровневые массивы-коллекции."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    users: list[User] = Field(default_factory=list)
    drivers: list[Driver] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    reviews: list[Review] = Field(default_factory=list)
    driver_applications: list[DriverApplication] = Field(default_factory=list)
    managers: list[Manager] = Field(default_factory=list)

    # --- выборки по ключу ---

    def user_by_id(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == str(user_id)), None)

    def user_by_email(self, email: str, role: UserRole) -> User | None:
        return next((u for u in self.users if u.email == email and u.role == role), None)

    def driver_for_user(self, user_id: str) -> Driver | None:
        # профиль ищем по userId, а для старых записей и по id
        uid = str(user_id)
        return next((d for d in self.drivers if d.user_id == uid or d.id == uid), None)

    def order_by_id(self, order_id: str) -> Order | None:
        return next((o for o in self.orders if o.id == str(order_id)), None)

    def application_by_id(self, app_id: str) -> DriverApplication | None:
        return next((a for a in self.driver_applications if a.id == str(app_id)), None)

    def manager_by_id(self, manager_id: str) -> Manager | None:
        return next((m for m in self.managers if m.id == str(manager_id)), None)

    def manager_by_login(self, login: str) -> Manager | None:
        return next((m for m in self.managers if m.login == login), None)

    def review_for(self, order_id: str, *, customer_id: str | None = None,
                   driver_id: str | None = None) -> Review | None:
        for r in self.reviews:
            if r.order_id != str(order_id):
                continue
            if customer_id is not None and r.customer_id != str(customer_id):
                continue
            if driver_id is not None and r.driver_id != str(driver_id):
                continue
            return r
        return None


# ---------- Хранилище ----------
class JsonStore:
    """
    Один JSON-файл как база данных.
    Любая запись: полный цикл read-modify-write под мьютексом,
    поэтому проверка и запись внутри transaction() не перемешиваются между запросами.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = threading.RLock()

    def read(self) -> Database:
        with self._lock:
            db, _ = self._load()
            return db

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        with self._lock:
            db, recovered = self._load()
            yield db
            # до сюда доходим только без исключения, иначе файл не трогаем
            if recovered:
                self._quarantine()
            self._save(db)

    def ensure_exists(self) -> None:
        with self._lock:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._save(Database())
                logger.info("created empty store at %s", self.path)

    def _load(self) -> tuple[Database, bool]:
        """
        (документ, подменён ли битый файл пустыми коллекциями).
        Пустыми коллекциями заменяем только то, что не читается как JSON-объект.
        Если JSON цел, но записи не проходят схему, падаем: иначе следующая запись
        затёрла бы все остальные записи.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Database(), False
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("store %s is unreadable (%s), using empty collections", self.path, e)
            return Database(), True

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("store %s is not valid JSON (%s), using empty collections", self.path, e)
            return Database(), True
        if not isinstance(data, dict):
            logger.warning("store %s is not a JSON object, using empty collections", self.path)
            return Database(), True

        try:
            return Database.model_validate(data), False
        except SchemaError as e:
            logger.error("store %s has %d invalid record fields", self.path, e.error_count())
            raise StorageCorrupted("Хранилище повреждено") from e

    def _quarantine(self) -> None:
        # битый, но непустой файл не затираем: откладываем рядом
        try:
            if self.path.stat().st_size == 0:
                return
        except FileNotFoundError:
            return
        stamp = utcnow().strftime("%Y%m%dT%H%M%S%f")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        os.replace(self.path, backup)
        logger.warning("moved unreadable store %s to %s", self.path, backup)

    def _save(self, db: Database) -> None:
        data = db.model_dump_json(by_alias=True, indent=2)
        # пишем во временный файл рядом и атомарно подменяем
        fd, tmp = tempfile.mkstemp(prefix=self.path.name, suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


# ---------- Dependency ----------
def get_store(request: Request) -> JsonStore:
    return request.app.state.store
