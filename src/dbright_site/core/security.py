"""Password hashing and signed session tokens."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from dbright_site.db.time import utcnow

SESSION_TOKEN_TYPE = "admin_session"
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    """Encode a password, truncated to bcrypt's 72-byte input limit."""
    encoded = password.encode("utf-8")
    if len(encoded) <= BCRYPT_MAX_BYTES:
        return encoded
    truncated = encoded[:BCRYPT_MAX_BYTES]
    # Drop a dangling partial multi-byte sequence.
    while truncated and truncated[-1] & 0x80 and not (truncated[-1] & 0x40):
        truncated = truncated[:-1]
    if truncated and truncated[-1] & 0xC0 == 0xC0:
        truncated = truncated[:-1]
    return truncated


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Malformed hashes verify as False instead of raising.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_session_token(
    username: str,
    *,
    secret: str,
    algorithm: str,
    expires_delta: timedelta,
) -> str:
    """Create a signed session token for an operator.

    Args:
        username: Authenticated operator name, stored as the subject
        secret: HMAC signing secret
        algorithm: JWT signing algorithm
        expires_delta: Lifetime of the token

    Returns:
        Encoded JWT string
    """
    issued_at = utcnow()
    claims = {
        "sub": username,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_delta).timestamp()),
        "type": SESSION_TOKEN_TYPE,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_session_token(token: str, *, secret: str, algorithm: str) -> dict[str, Any] | None:
    """Decode and verify a session token.

    Returns:
        The claims if the signature, expiry and token type are valid; otherwise None
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None
    if claims.get("type") != SESSION_TOKEN_TYPE or not claims.get("sub"):
        return None
    return claims
