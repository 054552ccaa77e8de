# pizzago/data/seed.py
import random
from decimal import Decimal
from itertools import combinations

from sqlalchemy.orm import Session

from pizzago.data.database import create_schema, make_engine, make_session_factory
from pizzago.data.models.pizza import PizzaModel, TagModel
from pizzago.utils.logging import get_logger

logger = get_logger(__name__)

BASE_TAGS = ["vegan", "vegetarian", "gluten-free", "spicy"]


def seed(db: Session, rng: random.Random | None = None) -> int:
    """One pizza per pair of base tags. Does nothing when the catalog is not empty."""
    if db.query(PizzaModel).first():
        return 0

    rng = rng or random.Random()
    tags = {key: TagModel(key=key, name=key) for key in BASE_TAGS}
    db.add_all(tags.values())

    created = 0
    for i, pair in enumerate(combinations(BASE_TAGS, 2), start=1):
        db.add(
            PizzaModel(
                name=f"Pizza {i}",
                description=f"A delicious pizza with {' and '.join(pair)}",
                ingredients=[],
                price=Decimal(rng.randint(5, 24)),
                tags=[tags[key] for key in pair],
            )
        )
        created += 1

    db.commit()
    logger.info(f"Inserted {created} pizzas")
    return created


if __name__ == "__main__":
    engine = make_engine()
    create_schema(engine)
    db = make_session_factory(engine)()
    try:
        seed(db)
    finally:
        db.close()
