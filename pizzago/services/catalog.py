# pizzago/services/catalog.py
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from pizzago.data.models.pizza import PizzaModel
from pizzago.domain.errors import NotFound, ValidationError
from pizzago.repos.pizza_repo import PizzaRepo
from pizzago.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def parse_tags(raw: str | None) -> List[str]:
    """``"Vegan, SPICY,"`` -> ``["vegan", "spicy"]``; every non-empty key filters, known or not."""
    if not raw:
        return []
    keys = []
    for part in raw.split(","):
        key = part.strip().lower()
        if key and key not in keys:
            keys.append(key)
    return keys


def parse_paging(limit: str | None, offset: str | None) -> tuple[int, int]:
    try:
        lim = DEFAULT_LIMIT if limit in (None, "") else int(limit)
    except ValueError:
        raise ValidationError("Limit must be between 0 and 100")
    if lim < 0 or lim > MAX_LIMIT:
        raise ValidationError("Limit must be between 0 and 100")

    try:
        off = 0 if offset in (None, "") else int(offset)
    except ValueError:
        raise ValidationError("Offset must be a non-negative integer")
    if off < 0:
        raise ValidationError("Offset must be a non-negative integer")

    return lim, off


def pizza_summary(pizza: PizzaModel) -> Dict[str, Any]:
    return {
        "id": pizza.id,
        "name": pizza.name,
        "tags": [t.name for t in pizza.tags],
        "price": pizza.price,
        "description": pizza.description,
    }


class CatalogService:
    """Read-only catalog: listing for display, lookup for cart and order pricing."""

    def __init__(self, db: Session):
        self.repo = PizzaRepo(db)

    def list_pizzas(self, tags: str | None, limit: str | None, offset: str | None) -> Dict[str, Any]:
        lim, off = parse_paging(limit, offset)
        keys = parse_tags(tags)

        pizzas, total = self.repo.find_pizzas(keys, off, lim)
        logger.info(f"Catalog query tags={keys} offset={off} limit={lim} -> {len(pizzas)}/{total}")

        return {
            "total": total,
            "limit": lim,
            "offset": off,
            "results": [pizza_summary(p) for p in pizzas],
        }

    def get_pizza(self, pizza_id: int) -> Dict[str, Any]:
        pizza = self.lookup(pizza_id)
        return {**pizza_summary(pizza), "ingredients": list(pizza.ingredients or [])}

    def lookup(self, pizza_id: int) -> PizzaModel:
        pizza = self.repo.get_pizza(pizza_id)
        if pizza is None:
            raise NotFound("Pizza not found")
        return pizza

    def price_of(self, pizza_id: int) -> Decimal:
        return Decimal(self.lookup(pizza_id).price)

    def lookup_many(self, pizza_ids: Iterable[int]) -> Dict[int, PizzaModel]:
        return {p.id: p for p in self.repo.get_pizzas(pizza_ids)}
