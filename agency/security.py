"""
Credential verification for admin-only routes.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

import bcrypt
import jwt

from agency.errors import TokenExpired, TokenInvalid, Unauthenticated

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def issue_token(admin_id: str, secret: str, expires_in: int = 3600) -> str:
    """Sign a bearer token for ``admin_id`` that expires after ``expires_in`` seconds."""
    if not secret:
        raise ValueError("JWT_SECRET is required to issue tokens")
    now = datetime.now(timezone.utc)
    payload = {
        "id": admin_id,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def verify_token(token: str | None, secret: str | None) -> str:
    """
    Verify a bearer token and return the embedded admin id.

    Raises ``Unauthenticated`` when no token is given, ``TokenExpired`` when the
    token is past its expiry and ``TokenInvalid`` for anything else.
    """
    if not token:
        raise Unauthenticated()
    if not secret:
        logger.error("JWT_SECRET is not configured; rejecting token")
        raise TokenInvalid("Token verification failed")
    try:
        decoded = jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except jwt.InvalidTokenError as exc:
        logger.info("Token verification error: %s", exc)
        raise TokenInvalid() from exc

    admin_id = decoded.get("id")
    if not admin_id:
        raise TokenInvalid()
    return str(admin_id)


def bearer_token(authorization: str | None) -> str | None:
    """Extract the credential from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, credential = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        # A bare credential is still checked, and rejected as malformed.
        return authorization.strip()
    return credential.strip() or None
