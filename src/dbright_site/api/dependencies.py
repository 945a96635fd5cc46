"""Shared API dependencies for services, client identity and operator sessions."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from dbright_site.core.settings import settings
from dbright_site.services.auth import OperatorSession, SessionAuthenticator
from dbright_site.services.export import ExportService
from dbright_site.services.intake import IntakeService, RequestOrigin
from dbright_site.services.moderation import ModerationService
from dbright_site.services.notifications import ContactNotifier
from dbright_site.services.store import MessageStore

CLIENT_ID_MAX_LENGTH = 200


def get_store(request: Request) -> MessageStore:
    """Return the process-wide message store."""
    return request.app.state.store


def get_authenticator(request: Request) -> SessionAuthenticator:
    """Return the process-wide session authenticator."""
    return request.app.state.authenticator


def get_notifier(request: Request) -> ContactNotifier:
    """Return the contact notification mailer."""
    return request.app.state.notifier


StoreDep = Annotated[MessageStore, Depends(get_store)]
AuthenticatorDep = Annotated[SessionAuthenticator, Depends(get_authenticator)]
NotifierDep = Annotated[ContactNotifier, Depends(get_notifier)]


def get_intake_service(store: StoreDep) -> IntakeService:
    return IntakeService(store)


def get_moderation_service(store: StoreDep) -> ModerationService:
    return ModerationService(store)


def get_export_service(store: StoreDep) -> ExportService:
    return ExportService(store, row_cap=settings.export_row_cap)


IntakeServiceDep = Annotated[IntakeService, Depends(get_intake_service)]
ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service)]
ExportServiceDep = Annotated[ExportService, Depends(get_export_service)]


def get_client_ip(request: Request) -> str | None:
    """Return the client address, preferring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def get_request_origin(request: Request) -> RequestOrigin:
    """Capture origin metadata stored alongside a submission."""
    return RequestOrigin(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


def get_client_identifier(request: Request) -> str:
    """Return the key the login rate limiter counts attempts under."""
    ip = get_client_ip(request) or "unknown"
    user_agent = request.headers.get("user-agent", "")
    return f"{ip}:{user_agent}"[:CLIENT_ID_MAX_LENGTH]


RequestOriginDep = Annotated[RequestOrigin, Depends(get_request_origin)]
ClientIdentifierDep = Annotated[str, Depends(get_client_identifier)]


def get_optional_session(
    request: Request,
    authenticator: AuthenticatorDep,
) -> OperatorSession | None:
    """Return the operator session proven by the cookie, if any."""
    token = request.cookies.get(settings.session_cookie_name)
    return authenticator.current_session(token)


OptionalSessionDep = Annotated[OperatorSession | None, Depends(get_optional_session)]


def get_current_session(session: OptionalSessionDep) -> OperatorSession:
    """Require an authenticated operator session.

    Raises:
        HTTPException: If no valid session cookie is present
    """
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return session


# Type alias for the admin guard
CurrentSessionDep = Annotated[OperatorSession, Depends(get_current_session)]
