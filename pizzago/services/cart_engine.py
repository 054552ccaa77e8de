# pizzago/services/cart_engine.py
"""
Pure mutations over a Cart value.

``total`` is kept incrementally: each call removes the old contribution of
the touched line and adds the new one, both at the unit price passed in.
Nothing here persists anything; the owner of the session writes it back.
"""
from decimal import Decimal

from pizzago.domain.errors import NotFound
from pizzago.domain.session import Cart, CartLine
from pizzago.utils.money import ZERO, D, round_money


def add_or_update(cart: Cart, pizza_id: int, quantity: int, unit_price: Decimal) -> Cart:
    """Set the quantity of ``pizza_id``; ``quantity <= 0`` drops the line."""
    price = D(unit_price)
    line = cart.find(pizza_id)

    if line is None:
        if quantity <= 0:
            return cart
        cart.items.append(CartLine(pizza_id=pizza_id, quantity=quantity))
        cart.total = _clamp(cart.total + price * quantity)
        return cart

    cart.total = cart.total - price * line.quantity
    if quantity <= 0:
        cart.items.remove(line)
    else:
        line.quantity = quantity
        cart.total = cart.total + price * quantity
    _settle(cart)
    return cart


def add(cart: Cart, pizza_id: int, quantity: int, unit_price: Decimal) -> Cart:
    """Additive form used by POST /cart: the new quantity is existing + ``quantity``."""
    line = cart.find(pizza_id)
    current = line.quantity if line else 0
    return add_or_update(cart, pizza_id, current + quantity, unit_price)


def remove(cart: Cart, pizza_id: int, unit_price: Decimal) -> Cart:
    line = cart.find(pizza_id)
    if line is None:
        raise NotFound("Pizza not found in cart")

    cart.total = cart.total - D(unit_price) * line.quantity
    cart.items.remove(line)
    _settle(cart)
    return cart


def take(cart: Cart, pizza_id: int, quantity: int, unit_price: Decimal) -> Cart:
    """
    Take up to ``quantity`` of ``pizza_id`` out of the cart, leaving whatever
    else is there. A missing line is skipped.
    """
    line = cart.find(pizza_id)
    if line is None:
        return cart

    taken = min(quantity, line.quantity)
    cart.total = cart.total - D(unit_price) * taken
    if taken == line.quantity:
        cart.items.remove(line)
    else:
        line.quantity -= taken
    _settle(cart)
    return cart


def clear(cart: Cart) -> Cart:
    cart.items = []
    cart.total = ZERO
    return cart


def _clamp(total: Decimal) -> Decimal:
    return max(ZERO, round_money(total))


def _settle(cart: Cart) -> None:
    # a price change between add and remove leaves drift; an empty cart is worth nothing
    cart.total = _clamp(cart.total) if cart.items else ZERO
