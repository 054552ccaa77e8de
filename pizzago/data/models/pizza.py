# pizzago/data/models/pizza.py
from sqlalchemy import JSON, Column, ForeignKey, Integer, Numeric, String, Table, Text
from sqlalchemy.orm import relationship

from pizzago.data.database import Base

pizza_tags = Table(
    "pizza_tags",
    Base.metadata,
    Column("pizza_id", Integer, ForeignKey("pizzas.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_key", String(64), ForeignKey("tags.key", ondelete="CASCADE"), primary_key=True),
)


class TagModel(Base):
    __tablename__ = "tags"

    # key is the lowercase lookup form, name is what clients see
    key = Column(String(64), primary_key=True)
    name = Column(String(64), nullable=False)


class PizzaModel(Base):
    __tablename__ = "pizzas"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    ingredients = Column(JSON, nullable=False, default=list)
    price = Column(Numeric(10, 2), nullable=False)

    tags = relationship("TagModel", secondary=pizza_tags, lazy="selectin", order_by="TagModel.key")
