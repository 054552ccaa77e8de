# pizzago/api/routers/health.py
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pizzago.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    checks = {}

    try:
        request.app.state.redis.ping()
        checks["redis"] = "ok"
    except RedisError as e:
        logger.warning(f"Health: redis down: {e}")
        checks["redis"] = "down"

    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Health: database down: {e}")
        checks["database"] = "down"

    healthy = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "ok" if healthy else "degraded", **checks},
    )
