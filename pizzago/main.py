# pizzago/main.py
from contextlib import asynccontextmanager

import redis
import uvicorn
from fastapi import FastAPI
from sqlalchemy.engine import Engine

from pizzago.api.errors import register_error_handlers
from pizzago.api.routers import auth, cart, health, orders, pizzas
from pizzago.data.database import create_schema, make_engine, make_session_factory
from pizzago.services.notification_service import CeleryEmailSender, EmailSender
from pizzago.utils.logging import get_logger
from pizzago.utils.settings import COOKIE_SECURE, REDIS_URL

logger = get_logger(__name__)

API_PREFIX = "/api/v1"


def create_app(
    engine: Engine | None = None,
    redis_client: redis.Redis | None = None,
    email_sender: EmailSender | None = None,
    cookie_secure: bool = COOKIE_SECURE,
) -> FastAPI:
    """
    Build the API. Store handles can be passed in; whatever is not passed
    is opened from settings on startup and closed again on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_engine = engine is None
        owns_redis = redis_client is None

        db_engine = engine or make_engine()
        app.state.engine = db_engine
        app.state.session_factory = make_session_factory(db_engine)
        app.state.redis = redis_client or redis.Redis.from_url(REDIS_URL, decode_responses=True)
        app.state.email_sender = email_sender or CeleryEmailSender()
        app.state.cookie_secure = cookie_secure

        logger.info("Creating database tables")
        create_schema(db_engine)
        logger.info("PizzaGo API started")
        try:
            yield
        finally:
            if owns_redis:
                app.state.redis.close()
            if owns_engine:
                db_engine.dispose()
            logger.info("PizzaGo API stopped")

    app = FastAPI(title="PizzaGo", version="1.0.0", lifespan=lifespan)

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(pizzas.router, prefix=API_PREFIX)
    app.include_router(cart.router, prefix=API_PREFIX)
    app.include_router(orders.router, prefix=API_PREFIX)
    app.include_router(auth.router, prefix=API_PREFIX)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
