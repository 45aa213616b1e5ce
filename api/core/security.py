"""Password hashing and access token helpers.

bcrypt for stored password hashes, PyJWT (HS256) for bearer tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from core.config import get_settings


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims carried by an access token."""

    sub: str
    email: str
    role: str
    name: str | None = None


class InvalidTokenError(Exception):
    """Raised when a token is malformed, badly signed or expired."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of a plaintext password against a bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(
    *,
    user_id: str,
    email: str,
    role: str,
    name: str | None,
    now: datetime | None = None,
) -> str:
    settings = get_settings()
    issued_at = now or datetime.now(UTC)
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "name": name,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.access_token_expire_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Verify signature and expiry, returning the claims.

    Raises:
        InvalidTokenError: On any verification failure or missing claim.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e

    role = payload.get("role")
    if not isinstance(role, str):
        raise InvalidTokenError("Token has no role claim")

    return TokenClaims(
        sub=str(payload["sub"]),
        email=str(payload.get("email", "")),
        role=role,
        name=payload.get("name"),
    )
