# pizzago/repos/pizza_repo.py
from typing import Iterable, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pizzago.data.models.pizza import PizzaModel, pizza_tags


class PizzaRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_pizza(self, pizza_id: int) -> PizzaModel | None:
        return self.db.get(PizzaModel, pizza_id)

    def get_pizzas(self, pizza_ids: Iterable[int]) -> List[PizzaModel]:
        ids = set(pizza_ids)
        if not ids:
            return []
        return list(self.db.execute(select(PizzaModel).where(PizzaModel.id.in_(ids))).scalars())

    def find_pizzas(self, tag_keys: List[str], offset: int, limit: int) -> Tuple[List[PizzaModel], int]:
        """
        Pizzas carrying ALL of ``tag_keys`` (every pizza when empty), ordered by id.
        Returns the requested page and the total number of matches.
        """
        if not tag_keys:
            count = self.db.execute(select(func.count(PizzaModel.id))).scalar_one()
            page = select(PizzaModel).order_by(PizzaModel.id).offset(offset).limit(limit)
            return list(self.db.execute(page).scalars()), count

        matching = (
            select(pizza_tags.c.pizza_id)
            .where(pizza_tags.c.tag_key.in_(tag_keys))
            .group_by(pizza_tags.c.pizza_id)
            .having(func.count(func.distinct(pizza_tags.c.tag_key)) == len(tag_keys))
        ).subquery()

        count = self.db.execute(select(func.count()).select_from(matching)).scalar_one()
        page = (
            select(PizzaModel)
            .where(PizzaModel.id.in_(select(matching.c.pizza_id)))
            .order_by(PizzaModel.id)
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(page).scalars()), count
