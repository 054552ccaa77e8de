# pizzago/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from pizzago.utils.settings import DATABASE_URL

Base = declarative_base()


def make_engine(url: str | None = None, **kwargs) -> Engine:
    return create_engine(url or DATABASE_URL, pool_pre_ping=True, future=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


def create_schema(engine: Engine) -> None:
    # all models must be imported before create_all so they register in Base.metadata
    import pizzago.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
