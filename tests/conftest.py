import os

os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from pizzago.data.database import create_schema, make_session_factory
from pizzago.data.models.pizza import PizzaModel, TagModel
from pizzago.main import create_app
from pizzago.services.session_manager import SessionManager
from pizzago.services.session_store import SessionStore


class RecordingEmailSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})

    def last_token(self):
        body = self.sent[-1]["body"]
        return body.rsplit("token=", 1)[1].strip()


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def store(redis_client):
    return SessionStore(redis_client)


@pytest.fixture()
def sessions(store):
    return SessionManager(store)


@pytest.fixture()
def mailer():
    return RecordingEmailSender()


@pytest.fixture()
def client(engine, redis_client, mailer):
    app = create_app(engine=engine, redis_client=redis_client, email_sender=mailer)
    # the session cookie is Secure, so talk https to keep it in the jar
    with TestClient(app, base_url="https://testserver") as c:
        yield c


@pytest.fixture()
def make_pizza(session_factory):
    """Insert a pizza and return its id."""

    def _make(name="Margherita", price="10.00", tags=(), ingredients=(), description=None):
        db = session_factory()
        try:
            tag_models = []
            for key in tags:
                tag = db.get(TagModel, key) or TagModel(key=key, name=key)
                tag_models.append(tag)
            pizza = PizzaModel(
                name=name,
                price=Decimal(price),
                description=description or f"{name} pizza",
                ingredients=list(ingredients),
                tags=tag_models,
            )
            db.add(pizza)
            db.commit()
            return pizza.id
        finally:
            db.close()

    return _make


@pytest.fixture()
def set_price(session_factory):
    def _set(pizza_id, price):
        db = session_factory()
        try:
            db.get(PizzaModel, pizza_id).price = Decimal(price)
            db.commit()
        finally:
            db.close()

    return _set


@pytest.fixture()
def delete_pizza(session_factory):
    def _delete(pizza_id):
        db = session_factory()
        try:
            db.delete(db.get(PizzaModel, pizza_id))
            db.commit()
        finally:
            db.close()

    return _delete
