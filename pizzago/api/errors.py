# pizzago/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from pizzago.domain.errors import InternalError, PizzaGoError
from pizzago.utils.logging import get_logger

logger = get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def domain_error_handler(request: Request, exc: PizzaGoError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in err["loc"][1:]) or "body" for err in exc.errors())
    return _error(400, f"Invalid request: {fields}")


async def infrastructure_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} failed on a backing store", exc_info=exc)
    err = InternalError()
    return _error(err.status_code, err.message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PizzaGoError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RedisError, infrastructure_error_handler)
    app.add_exception_handler(SQLAlchemyError, infrastructure_error_handler)
