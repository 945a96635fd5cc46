# src/dbright_site/api/endpoints/admin_login.py
"""Operator login, logout and session probe."""

from __future__ import annotations

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from dbright_site.api.dependencies import (
    AuthenticatorDep,
    ClientIdentifierDep,
    OptionalSessionDep,
)
from dbright_site.core.settings import settings
from dbright_site.schemas.admin import LoginRequest, SessionResponse

router = APIRouter(prefix="/admin", tags=["admin", "authentication"])


@router.post("/login", response_model=SessionResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    authenticator: AuthenticatorDep,
    client_id: ClientIdentifierDep,
) -> SessionResponse:
    """Check operator credentials and set the session cookie.

    Attempts are rate limited per client before credentials are compared.
    """
    session = authenticator.login(credentials.username, credentials.password, client_id)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        max_age=session.max_age,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return SessionResponse(authenticated=True, username=session.username)


@router.delete("/login")
def logout(
    response: Response,
    authenticator: AuthenticatorDep,
    session: OptionalSessionDep,
) -> dict[str, bool | str]:
    """Clear the session cookie. Always succeeds, with or without a session."""
    authenticator.logout(session)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return {"success": True, "message": "Logged out successfully"}


@router.get("/login", response_model=SessionResponse)
def session_probe(session: OptionalSessionDep) -> SessionResponse | JSONResponse:
    """Report whether the caller holds a valid operator session."""
    if session is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"authenticated": False},
        )
    return SessionResponse(authenticated=True, username=session.username)
