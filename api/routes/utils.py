"""Shared helpers for admin route handlers."""

from datetime import datetime

from fastapi import HTTPException

from schemas import ErrorResponse
from services.aggregation import as_utc

ADMIN_RESPONSES: dict[int | str, dict] = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Super admin access required"},
}

NOT_FOUND_RESPONSE: dict[int | str, dict] = {
    404: {"model": ErrorResponse, "description": "Not found"},
}


def parse_date_param(value: str | None, name: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime query value as a UTC instant.

    A bare date means midnight UTC on that day.

    Raises:
        HTTPException: 400 if the value is not ISO-8601.
    """
    if value is None or value == "":
        return None
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value}") from e
