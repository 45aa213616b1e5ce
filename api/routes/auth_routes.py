"""Credential login endpoint."""

from fastapi import APIRouter, HTTPException, Request

from core.database import DbSession
from core.ratelimit import LOGIN_LIMIT, limiter
from schemas import ErrorResponse, LoginRequest, LoginResponse
from services.auth_service import (
    AccountDeactivatedError,
    InvalidCredentialsError,
    MissingCredentialsError,
    login,
)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Exchange email and password for an access token",
    responses={
        400: {"model": ErrorResponse, "description": "Missing email or password"},
        401: {"model": ErrorResponse, "description": "Invalid or deactivated"},
        429: {"model": ErrorResponse, "description": "Too many attempts"},
    },
)
@limiter.limit(LOGIN_LIMIT)
async def login_endpoint(
    request: Request,
    body: LoginRequest,
    db: DbSession,
) -> LoginResponse:
    """Verify credentials and return a 24h bearer token."""
    try:
        return await login(db, body.email, body.password)
    except MissingCredentialsError as e:
        raise HTTPException(
            status_code=400, detail="Email and password are required"
        ) from e
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail="Invalid credentials") from e
    except AccountDeactivatedError as e:
        raise HTTPException(status_code=401, detail="Account is deactivated") from e
