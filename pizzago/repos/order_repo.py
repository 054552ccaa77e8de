# pizzago/repos/order_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from pizzago.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        # header and lines go out in one transaction via the items cascade
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_session_order(self, order_id: int, session_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id, OrderModel.session_id == session_id)
        ).scalar_one_or_none()

    def list_session_orders(self, session_id: str) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.session_id == session_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )
