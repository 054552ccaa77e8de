# pizzago/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Money travels as Decimal internally and as a JSON number on the wire.
MoneyOut = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------- catalog

class PizzaSummaryOut(CamelModel):
    id: int
    name: str
    tags: List[str]
    price: MoneyOut
    description: str | None = None


class PizzaDetailOut(PizzaSummaryOut):
    ingredients: List[str] = []


class PizzaPageOut(CamelModel):
    total: int
    limit: int
    offset: int
    results: List[PizzaSummaryOut]


# ---------------------------------------------------------------- cart

class CartItemIn(CamelModel):
    """Body of POST /cart; presence checks happen in the service."""

    pizza_id: int | None = None
    quantity: int | None = None


class CartQuantityIn(CamelModel):
    """Body of PUT /cart/{pizzaId}."""

    quantity: int | None = None


class CartLineOut(CamelModel):
    pizza_id: int
    quantity: int


class CartOut(CamelModel):
    items: List[CartLineOut]
    total: MoneyOut


# ---------------------------------------------------------------- orders

class OrderLineOut(CamelModel):
    pizza_id: int
    name: str | None = None
    quantity: int
    unit_price: MoneyOut
    total_price: MoneyOut


class OrderCreatedOut(CamelModel):
    order_id: int
    total: MoneyOut
    created_at: datetime
    items: List[OrderLineOut]


class OrderOut(CamelModel):
    order_id: int
    created_at: datetime
    total: MoneyOut
    status: str
    items: List[OrderLineOut]


class OrderListOut(CamelModel):
    orders: List[OrderOut]


# ---------------------------------------------------------------- auth

class CredentialsIn(CamelModel):
    email: str | None = None
    password: str | None = None


class EmailIn(CamelModel):
    email: str | None = None


class MessageOut(CamelModel):
    message: str


class UserOut(CamelModel):
    id: int
    email: str


class LoginOut(CamelModel):
    user: UserOut
