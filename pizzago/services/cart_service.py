# pizzago/services/cart_service.py
from typing import Any, Dict

from pizzago.domain.errors import NotFound, ValidationError
from pizzago.domain.session import Cart, SessionRecord
from pizzago.services import cart_engine
from pizzago.services.catalog import CatalogService
from pizzago.services.session_manager import SessionManager
from pizzago.utils.logging import get_logger

logger = get_logger(__name__)


def cart_view(cart: Cart) -> Dict[str, Any]:
    return {
        "items": [{"pizza_id": i.pizza_id, "quantity": i.quantity} for i in cart.items],
        "total": cart.total,
    }


class CartService:
    """
    Cart use cases on top of the visitor's session.
    Query (get) only reads; commands price against the catalog first,
    then run the cart engine inside a session write.
    """

    def __init__(self, sessions: SessionManager, catalog: CatalogService):
        self.sessions = sessions
        self.catalog = catalog

    # query
    def get_cart(self, session: SessionRecord) -> Dict[str, Any]:
        return cart_view(session.cart)

    # commands
    def add_item(self, session: SessionRecord, pizza_id: Any, quantity: Any) -> Dict[str, Any]:
        if not pizza_id or not quantity:
            raise ValidationError("Pizza ID and quantity are required")
        if not isinstance(pizza_id, int) or not isinstance(quantity, int) or pizza_id < 1 or quantity < 1:
            raise ValidationError("Invalid pizza ID or quantity")

        price = self.catalog.price_of(pizza_id)

        updated = self.sessions.mutate(
            session, lambda s: cart_engine.add(s.cart, pizza_id, quantity, price)
        )
        logger.info(f"Cart {_short(session)}: +{quantity} x pizza {pizza_id} @ {price}")
        return cart_view(updated.cart)

    def set_quantity(self, session: SessionRecord, pizza_id: int, quantity: Any) -> Dict[str, Any]:
        if quantity is None or not isinstance(quantity, int):
            raise ValidationError("Quantity is required")

        price = self.catalog.price_of(pizza_id)

        def _set(s: SessionRecord) -> None:
            if quantity <= 0:
                cart_engine.remove(s.cart, pizza_id, price)
            else:
                cart_engine.add_or_update(s.cart, pizza_id, quantity, price)

        updated = self.sessions.mutate(session, _set)
        logger.info(f"Cart {_short(session)}: pizza {pizza_id} set to {max(quantity, 0)}")
        return cart_view(updated.cart)

    def remove_item(self, session: SessionRecord, pizza_id: int) -> Dict[str, Any]:
        # not-in-cart is checked before the catalog so a stale id still reports the cart miss
        if session.cart.find(pizza_id) is None:
            raise NotFound("Pizza not found in cart")

        price = self.catalog.price_of(pizza_id)

        updated = self.sessions.mutate(
            session, lambda s: cart_engine.remove(s.cart, pizza_id, price)
        )
        logger.info(f"Cart {_short(session)}: pizza {pizza_id} removed")
        return cart_view(updated.cart)

    def clear(self, session: SessionRecord) -> Dict[str, Any]:
        updated = self.sessions.mutate(session, lambda s: cart_engine.clear(s.cart))
        logger.info(f"Cart {_short(session)}: cleared")
        return cart_view(updated.cart)


def _short(session: SessionRecord) -> str:
    # never log a full bearer token
    return session.id[:8]
