"""Error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations

from fastapi import status


class DbrightError(RuntimeError):
    """Base exception for failures that map onto an HTTP status.

    `public_detail` is the only text that may reach an untrusted caller.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.public_detail)
        if detail is not None:
            self.public_detail = detail


class ValidationError(DbrightError):
    """A required field is missing or an enumerated value is invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_detail = "Invalid request"


class Unauthorized(DbrightError):
    """The caller holds no valid operator session."""

    status_code = status.HTTP_401_UNAUTHORIZED
    public_detail = "Unauthorized"


class InvalidCredentials(Unauthorized):
    """The supplied username or password did not match."""

    public_detail = "Invalid credentials"


class RateLimited(DbrightError):
    """Too many login attempts from one client."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    public_detail = "Too many login attempts. Please try again later."

    def __init__(self, retry_after: int, detail: str | None = None) -> None:
        super().__init__(detail)
        self.retry_after = retry_after


class StoreUnavailable(DbrightError):
    """The message store could not be reached or rejected the operation."""

    public_detail = "The service is temporarily unavailable. Please try again later."


class ExportFailure(DbrightError):
    """An export could not be produced."""

    public_detail = "Failed to export messages"
