# import all models so SQLAlchemy registers them in Base.metadata

from pizzago.data.models.account import AccountModel
from pizzago.data.models.email_verification import EmailVerificationModel
from pizzago.data.models.pizza import PizzaModel, TagModel, pizza_tags
from pizzago.data.models.order import OrderModel, OrderItemModel

__all__ = [
    "AccountModel",
    "EmailVerificationModel",
    "PizzaModel",
    "TagModel",
    "pizza_tags",
    "OrderModel",
    "OrderItemModel",
]
