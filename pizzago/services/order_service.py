# pizzago/services/order_service.py
from enum import Enum
from typing import Any, Dict, List

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from pizzago.data.models.order import OrderItemModel, OrderModel
from pizzago.domain.errors import Conflict, EmptyCart, ItemUnavailable, NotFound
from pizzago.domain.session import SessionRecord
from pizzago.repos.order_repo import OrderRepo
from pizzago.services import cart_engine
from pizzago.services.catalog import CatalogService
from pizzago.services.session_manager import SessionManager
from pizzago.utils.logging import get_logger
from pizzago.utils.money import ZERO, round_money

logger = get_logger(__name__)


class CommitStage(str, Enum):
    VALIDATING = "validating"
    PRICING = "pricing"
    PERSISTING = "persisting"
    CLEARING_CART = "clearing_cart"
    DONE = "done"


def order_line_view(item: OrderItemModel) -> Dict[str, Any]:
    return {
        "pizza_id": item.pizza_id,
        "name": item.pizza.name if item.pizza is not None else None,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "total_price": item.total_price,
    }


def order_view(order: OrderModel) -> Dict[str, Any]:
    return {
        "order_id": order.id,
        "created_at": order.created_at,
        "total": order.total,
        "status": order.status,
        "items": [order_line_view(i) for i in order.items],
    }


class OrderService:
    """
    Turns the session cart into an order.

    Stages run strictly in order: validating -> pricing -> persisting ->
    clearing_cart -> done. The order row and the session live in different
    stores, so there is no transaction spanning both: if clearing the cart
    fails after the order was written, the order stays and the cart keeps
    its items. Clearing takes out exactly the ordered lines, so a line added
    by a concurrent request after pricing survives in the cart. Placing an order is therefore not idempotent.
    """

    def __init__(self, db: Session, sessions: SessionManager, catalog: CatalogService):
        self.repo = OrderRepo(db)
        self.sessions = sessions
        self.catalog = catalog

    def place_order(self, session: SessionRecord) -> Dict[str, Any]:
        stage = CommitStage.VALIDATING
        cart = session.cart
        if not cart.items:
            raise EmptyCart()

        stage = self._advance(session, stage, CommitStage.PRICING)
        pizzas = self.catalog.lookup_many(line.pizza_id for line in cart.items)

        lines: List[OrderItemModel] = []
        for line in cart.items:
            pizza = pizzas.get(line.pizza_id)
            if pizza is None:
                logger.warning(f"Pizza {line.pizza_id} from cart {session.id[:8]} no longer in catalog")
                raise ItemUnavailable(line.pizza_id)
            unit_price = round_money(pizza.price)
            lines.append(
                OrderItemModel(
                    pizza_id=line.pizza_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    total_price=round_money(unit_price * line.quantity),
                    pizza=pizza,
                )
            )
        # recomputed from the lines, never taken from the cart's running total
        total = sum((l.total_price for l in lines), ZERO)

        stage = self._advance(session, stage, CommitStage.PERSISTING)
        order = self.repo.create_order(
            OrderModel(
                user_id=session.user_id,
                session_id=session.id,
                status="pending",
                total=total,
                items=lines,
            )
        )
        logger.info(f"Order {order.id} persisted, total {total}, {len(lines)} line(s)")

        stage = self._advance(session, stage, CommitStage.CLEARING_CART)
        try:
            self.sessions.mutate(session, lambda s: self._take_ordered(s, lines))
        except (RedisError, Conflict):
            logger.warning(f"Order {order.id} persisted but the cart of session {session.id[:8]} was not cleared")
            raise

        self._advance(session, stage, CommitStage.DONE)
        return {
            "order_id": order.id,
            "total": order.total,
            "created_at": order.created_at,
            "items": [order_line_view(i) for i in order.items],
        }

    def list_orders(self, session: SessionRecord) -> Dict[str, Any]:
        orders = self.repo.list_session_orders(session.id)
        return {"orders": [order_view(o) for o in orders]}

    def get_order(self, session: SessionRecord, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_session_order(order_id, session.id)
        if order is None:
            raise NotFound("Order not found")
        return order_view(order)

    @staticmethod
    def _take_ordered(session: SessionRecord, lines: List[OrderItemModel]) -> None:
        # only what was ordered leaves the cart; lines added meanwhile by another request stay
        for line in lines:
            cart_engine.take(session.cart, line.pizza_id, line.quantity, line.unit_price)

    @staticmethod
    def _advance(session: SessionRecord, current: CommitStage, nxt: CommitStage) -> CommitStage:
        logger.debug(f"Order commit {session.id[:8]}: {current.value} -> {nxt.value}")
        return nxt
