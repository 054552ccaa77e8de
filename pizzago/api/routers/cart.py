# pizzago/api/routers/cart.py
from fastapi import APIRouter, Depends

from pizzago.api.deps import current_session, get_cart_service, parse_id
from pizzago.domain.schemas import CartItemIn, CartOut, CartQuantityIn
from pizzago.domain.session import SessionRecord
from pizzago.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    session: SessionRecord = Depends(current_session),
    svc: CartService = Depends(get_cart_service),
):
    return svc.get_cart(session)


@router.post("", response_model=CartOut)
def add_item(
    payload: CartItemIn | None = None,
    session: SessionRecord = Depends(current_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Adds ``quantity`` to the line of ``pizzaId`` (repeat calls accumulate).
    """
    payload = payload or CartItemIn()
    return svc.add_item(session, payload.pizza_id, payload.quantity)


@router.put("/{pizza_id}", response_model=CartOut)
def set_quantity(
    pizza_id: str,
    payload: CartQuantityIn | None = None,
    session: SessionRecord = Depends(current_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Sets the quantity of one line; zero or less removes it.
    """
    payload = payload or CartQuantityIn()
    return svc.set_quantity(session, parse_id(pizza_id, "Invalid pizza ID"), payload.quantity)


@router.delete("/{pizza_id}", response_model=CartOut)
def remove_item(
    pizza_id: str,
    session: SessionRecord = Depends(current_session),
    svc: CartService = Depends(get_cart_service),
):
    return svc.remove_item(session, parse_id(pizza_id, "Invalid pizza ID"))


@router.delete("", response_model=CartOut)
def clear_cart(
    session: SessionRecord = Depends(current_session),
    svc: CartService = Depends(get_cart_service),
):
    return svc.clear(session)
