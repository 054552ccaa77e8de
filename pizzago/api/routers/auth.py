# pizzago/api/routers/auth.py
from fastapi import APIRouter, Depends, Query, Request, Response

from pizzago.api.deps import current_session, get_auth_service
from pizzago.domain.schemas import CredentialsIn, EmailIn, LoginOut, MessageOut
from pizzago.services.auth_service import AuthService
from pizzago.utils.settings import SESSION_COOKIE_NAME

router = APIRouter(prefix="/auth", tags=["auth"])

SESSION_TOKEN_HEADER = "X-Session-Token"


@router.post("/register", response_model=MessageOut, status_code=201, dependencies=[Depends(current_session)])
def register(payload: CredentialsIn | None = None, svc: AuthService = Depends(get_auth_service)):
    payload = payload or CredentialsIn()
    return svc.register(payload.email, payload.password)


@router.post("/resend-verification", response_model=MessageOut, dependencies=[Depends(current_session)])
def resend_verification(payload: EmailIn | None = None, svc: AuthService = Depends(get_auth_service)):
    payload = payload or EmailIn()
    return svc.resend_verification(payload.email)


@router.get("/verify", response_model=MessageOut)
def verify(token: str | None = Query(None), svc: AuthService = Depends(get_auth_service)):
    return svc.verify(token)


@router.post("/login", response_model=LoginOut)
def login(
    response: Response,
    payload: CredentialsIn | None = None,
    svc: AuthService = Depends(get_auth_service),
):
    """
    The bearer token of the new account session comes back in the
    X-Session-Token header; the cookie session of the caller is untouched.
    """
    payload = payload or CredentialsIn()
    body, token = svc.login(payload.email, payload.password)
    response.headers[SESSION_TOKEN_HEADER] = token
    return body


@router.post("/logout", response_model=MessageOut)
def logout(request: Request, response: Response, svc: AuthService = Depends(get_auth_service)):
    body = svc.logout(request.cookies.get(SESSION_COOKIE_NAME))
    response.delete_cookie(SESSION_COOKIE_NAME)
    return body
