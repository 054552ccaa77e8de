# pizzago/domain/session.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

from pizzago.utils.money import ZERO


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartLine(_Record):
    pizza_id: int
    quantity: int = Field(..., ge=1)


class Cart(_Record):
    items: List[CartLine] = Field(default_factory=list)
    total: Decimal = ZERO

    def find(self, pizza_id: int) -> CartLine | None:
        for line in self.items:
            if line.pizza_id == pizza_id:
                return line
        return None


class SessionRecord(_Record):
    """
    Per-visitor state stored as one JSON blob under the session key.

    ``version`` grows by one on every successful write. The blob the record
    was loaded from is kept aside so the next write can be conditional on it.
    """

    id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    cart: Cart = Field(default_factory=Cart)
    user_id: int | None = None
    version: int = 1

    _raw: str | None = PrivateAttr(default=None)

    @property
    def stored_blob(self) -> str | None:
        return self._raw

    def dumps(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def loads(cls, raw: str) -> "SessionRecord":
        record = cls.model_validate_json(raw)
        record._raw = raw
        return record

    def mark_stored(self, raw: str) -> None:
        self._raw = raw
