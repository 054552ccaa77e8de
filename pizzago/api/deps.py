# pizzago/api/deps.py
from typing import Iterator

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from pizzago.domain.errors import ValidationError
from pizzago.domain.session import SessionRecord
from pizzago.services.auth_service import AuthService
from pizzago.services.cart_service import CartService
from pizzago.services.catalog import CatalogService
from pizzago.services.order_service import OrderService
from pizzago.services.session_manager import SessionManager
from pizzago.services.session_store import SessionStore
from pizzago.utils.settings import SESSION_COOKIE_NAME


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_store(request: Request) -> SessionStore:
    return SessionStore(request.app.state.redis)


def get_session_manager(store: SessionStore = Depends(get_store)) -> SessionManager:
    return SessionManager(store)


def set_session_cookie(request: Request, response: Response, session_id: str) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session_id,
        httponly=True,
        secure=request.app.state.cookie_secure,
    )


def current_session(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> SessionRecord:
    """Resolve the visitor's session from the cookie, creating one when needed."""
    session, created = sessions.resolve(request.cookies.get(SESSION_COOKIE_NAME))
    if created:
        set_session_cookie(request, response, session.id)
    return session


def get_catalog(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_cart_service(
    sessions: SessionManager = Depends(get_session_manager),
    catalog: CatalogService = Depends(get_catalog),
) -> CartService:
    return CartService(sessions, catalog)


def get_order_service(
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
    catalog: CatalogService = Depends(get_catalog),
) -> OrderService:
    return OrderService(db, sessions, catalog)


def get_auth_service(
    request: Request,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_store),
    sessions: SessionManager = Depends(get_session_manager),
) -> AuthService:
    return AuthService(db, sessions, store, request.app.state.email_sender)


def parse_id(raw: str, message: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(message)
    return value
