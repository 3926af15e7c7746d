# ridehail/models/base.py
from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Record(BaseModel):
    """
    Запись JSON-документа.
    В файле ключи в camelCase (passwordHash, driverId, ...), в коде snake_case.
    Незнакомые ключи не теряем: extra="allow".
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
        coerce_numbers_to_str=True,
    )

    def to_dict(self, *, exclude: set[str] | None = None) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
