"""Authentication dependencies for admin routes.

Tokens are read from the ``Authorization: Bearer`` header first, then from
the ``auth-token`` cookie set by the admin frontend.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from core.config import get_settings
from core.logger import get_logger
from core.security import InvalidTokenError, TokenClaims, decode_access_token
from core.wide_event import set_wide_event_fields
from models import UserRole

logger = get_logger(__name__)


def _extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    return request.cookies.get(get_settings().auth_cookie_name) or None


def require_auth(request: Request) -> TokenClaims:
    """Verify the request token and return its claims.

    Raises:
        HTTPException: 401 if the token is missing or fails verification.
    """
    token = _extract_token(request)
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized - Please login first")

    try:
        claims = decode_access_token(token)
    except InvalidTokenError as e:
        logger.info("auth.token.rejected", reason=str(e))
        raise HTTPException(
            status_code=401, detail="Unauthorized - Please login first"
        ) from e

    request.state.user_id = claims.sub
    set_wide_event_fields(user_id=claims.sub, user_role=claims.role)
    return claims


def require_super_admin(
    claims: Annotated[TokenClaims, Depends(require_auth)],
) -> TokenClaims:
    """Allow only SUPER_ADMIN tokens through.

    Raises:
        HTTPException: 403 for any other role.
    """
    if claims.role != UserRole.SUPER_ADMIN.value:
        logger.warning("auth.forbidden", user_id=claims.sub, role=claims.role)
        raise HTTPException(
            status_code=403, detail="Forbidden - Super Admin access required"
        )
    return claims


SuperAdmin = Annotated[TokenClaims, Depends(require_super_admin)]
