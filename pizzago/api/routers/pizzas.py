# pizzago/api/routers/pizzas.py
from fastapi import APIRouter, Depends, Query

from pizzago.api.deps import get_catalog, parse_id
from pizzago.domain.schemas import PizzaDetailOut, PizzaPageOut
from pizzago.services.catalog import CatalogService

router = APIRouter(prefix="/pizzas", tags=["pizzas"])


@router.get("", response_model=PizzaPageOut)
def list_pizzas(
    tags: str | None = Query(None),
    limit: str | None = Query(None),
    offset: str | None = Query(None),
    catalog: CatalogService = Depends(get_catalog),
):
    return catalog.list_pizzas(tags, limit, offset)


@router.get("/{pizza_id}", response_model=PizzaDetailOut)
def get_pizza(pizza_id: str, catalog: CatalogService = Depends(get_catalog)):
    return catalog.get_pizza(parse_id(pizza_id, "Invalid pizza ID"))
