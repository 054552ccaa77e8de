# pizzago/api/routers/orders.py
from fastapi import APIRouter, Depends

from pizzago.api.deps import current_session, get_order_service, parse_id
from pizzago.domain.schemas import OrderCreatedOut, OrderListOut, OrderOut
from pizzago.domain.session import SessionRecord
from pizzago.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderCreatedOut, status_code=201)
def place_order(
    session: SessionRecord = Depends(current_session),
    svc: OrderService = Depends(get_order_service),
):
    """
    Converts the session cart into an order priced at current catalog prices
    and empties the cart. Not idempotent: a retry after a timeout can create a
    second order, check GET /orders first.
    """
    return svc.place_order(session)


@router.get("", response_model=OrderListOut)
def list_orders(
    session: SessionRecord = Depends(current_session),
    svc: OrderService = Depends(get_order_service),
):
    return svc.list_orders(session)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    session: SessionRecord = Depends(current_session),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_order(session, parse_id(order_id, "Invalid order ID"))
