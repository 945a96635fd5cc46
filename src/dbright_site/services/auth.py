"""Operator authentication and session handling."""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import timedelta

from dbright_site.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)
from dbright_site.core.settings import Settings
from dbright_site.services.errors import InvalidCredentials, RateLimited, ValidationError
from dbright_site.services.rate_limiter import LoginRateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatorSession:
    """An authenticated operator session."""

    username: str
    token: str
    max_age: int


class SessionAuthenticator:
    """Verifies operator credentials and issues signed session tokens.

    Credentials are compared against a bcrypt hash: either the configured
    `ADMIN_PASSWORD_HASH` or a hash of `ADMIN_PASSWORD` computed once here.
    """

    def __init__(self, config: Settings, rate_limiter: LoginRateLimiter) -> None:
        self._username = config.admin_username
        self._password_hash = config.admin_password_hash or hash_password(config.admin_password)
        self._secret = config.session_secret
        self._algorithm = config.jwt_algorithm
        self._max_age = config.session_max_age_seconds
        self.rate_limiter = rate_limiter

    @property
    def max_age(self) -> int:
        return self._max_age

    def login(self, username: str, password: str, client_id: str) -> OperatorSession:
        """Check credentials for `client_id` and open a session.

        Raises:
            RateLimited: The client is locked out; checked before credentials
            ValidationError: Username or password is missing
            InvalidCredentials: Username or password does not match
        """
        decision = self.rate_limiter.check(client_id)
        if not decision.allowed:
            raise RateLimited(decision.retry_after or 1)

        if not username or not password:
            raise ValidationError("Username and password are required")

        username_ok = hmac.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        # Always run bcrypt so a wrong username costs the same as a wrong password.
        password_ok = verify_password(password, self._password_hash)
        if not (username_ok and password_ok):
            logger.warning(
                "Failed admin login from %s (%s attempts left)",
                client_id,
                decision.remaining_attempts,
            )
            raise InvalidCredentials()

        self.rate_limiter.reset(client_id)
        token = create_session_token(
            self._username,
            secret=self._secret,
            algorithm=self._algorithm,
            expires_delta=timedelta(seconds=self._max_age),
        )
        logger.info("Admin %s logged in", self._username)
        return OperatorSession(username=self._username, token=token, max_age=self._max_age)

    def current_session(self, token: str | None) -> OperatorSession | None:
        """Return the session a cookie token proves, or None."""
        if not token:
            return None
        claims = decode_session_token(token, secret=self._secret, algorithm=self._algorithm)
        if claims is None or claims["sub"] != self._username:
            return None
        return OperatorSession(username=claims["sub"], token=token, max_age=self._max_age)

    def logout(self, session: OperatorSession | None) -> None:
        """End a session.

        Tokens are stateless, so logging out only means the caller drops its
        cookie; there is nothing to revoke server-side.
        """
        if session is not None:
            logger.info("Admin %s logged out", session.username)
