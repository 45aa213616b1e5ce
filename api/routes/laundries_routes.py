"""Super-admin laundry management and analytics endpoints.

The leaderboard route is declared before ``/{laundry_id}`` so the literal
``performance`` segment is not captured as an id.
"""

from typing import Literal

from fastapi import APIRouter, Body, HTTPException, Query, Request

from core.auth import SuperAdmin
from core.database import DbSession
from core.ratelimit import ADMIN_LIMIT, limiter
from models import OrderStatus
from repositories.order_repository import OrderFilters
from repositories.review_repository import ReviewFilters
from routes.utils import ADMIN_RESPONSES, NOT_FOUND_RESPONSE, parse_date_param
from schemas import (
    ErrorResponse,
    LaundryActivityResponse,
    LaundryDetailResponse,
    LaundryOrdersResponse,
    LaundryPerformanceResponse,
    LaundryResponse,
    LaundryReviewsResponse,
    LaundryUpdateRequest,
    LeaderboardResponse,
    SuspendRequest,
    SuspendResponse,
)
from services.laundry_analytics_service import (
    get_laundry_orders,
    get_laundry_performance,
    get_laundry_reviews,
    get_leaderboard,
)
from services.laundry_service import (
    InvalidLaundryUpdateError,
    LaundryAlreadySuspendedError,
    LaundryNotFoundError,
    get_laundry_activity,
    get_laundry_detail,
    suspend_laundry,
    update_laundry,
)

router = APIRouter(prefix="/api/admin/laundries", tags=["laundries"])


def _laundry_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Laundry not found")


@router.get(
    "/performance",
    response_model=LeaderboardResponse,
    summary="Leaderboard of active laundries",
    responses=ADMIN_RESPONSES,
)
@limiter.limit(ADMIN_LIMIT)
async def leaderboard_endpoint(
    request: Request,
    admin: SuperAdmin,
    db: DbSession,
    sort_by: str = Query(default="ordersMonth", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> LeaderboardResponse:
    """Rank active laundries by this month's performance.

    Sorting by ``customers`` only reorders the requested page.
    """
    return await get_leaderboard(db, sort_by, sort_order, page, limit)


@router.get(
    "/{laundry_id}",
    response_model=LaundryDetailResponse,
    summary="Laundry detail",
    responses={**ADMIN_RESPONSES, **NOT_FOUND_RESPONSE},
)
@limiter.limit(ADMIN_LIMIT)
async def laundry_detail_endpoint(
    request: Request,
    laundry_id: str,
    admin: SuperAdmin,
    db: DbSession,
) -> LaundryDetailResponse:
    try:
        return await get_laundry_detail(db, laundry_id)
    except LaundryNotFoundError as e:
        raise _laundry_not_found() from e


@router.patch(
    "/{laundry_id}",
    response_model=LaundryResponse,
    summary="Update laundry profile fields",
    responses={
        **ADMIN_RESPONSES,
        **NOT_FOUND_RESPONSE,
        400: {"model": ErrorResponse, "description": "Invalid update"},
    },
)
@limiter.limit(ADMIN_LIMIT)
async def update_laundry_endpoint(
    request: Request,
    laundry_id: str,
    body: LaundryUpdateRequest,
    admin: SuperAdmin,
    db: DbSession,
) -> LaundryResponse:
    """Apply only the fields present in the request body."""
    try:
        return await update_laundry(db, laundry_id, body, admin.sub)
    except LaundryNotFoundError as e:
        raise _laundry_not_found() from e
    except InvalidLaundryUpdateError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post(
    "/{laundry_id}/suspend",
    response_model=SuspendResponse,
    summary="Suspend a laundry",
    responses={
        **ADMIN_RESPONSES,
        **NOT_FOUND_RESPONSE,
        400: {"model": ErrorResponse, "description": "Already suspended"},
    },
)
@limiter.limit(ADMIN_LIMIT)
async def suspend_laundry_endpoint(
    request: Request,
    laundry_id: str,
    admin: SuperAdmin,
    db: DbSession,
    body: SuspendRequest | None = Body(default=None),
) -> SuspendResponse:
    """Suspend the laundry and cancel its pending and confirmed orders."""
    reason = body.reason if body else None
    try:
        return await suspend_laundry(db, laundry_id, admin.sub, reason)
    except LaundryNotFoundError as e:
        raise _laundry_not_found() from e
    except LaundryAlreadySuspendedError as e:
        raise HTTPException(
            status_code=400, detail="Laundry is already suspended"
        ) from e


@router.get(
    "/{laundry_id}/performance",
    response_model=LaundryPerformanceResponse,
    summary="Twelve-month laundry performance",
    responses={**ADMIN_RESPONSES, **NOT_FOUND_RESPONSE},
)
@limiter.limit(ADMIN_LIMIT)
async def laundry_performance_endpoint(
    request: Request,
    laundry_id: str,
    admin: SuperAdmin,
    db: DbSession,
) -> LaundryPerformanceResponse:
    try:
        return await get_laundry_performance(db, laundry_id)
    except LaundryNotFoundError as e:
        raise _laundry_not_found() from e


@router.get(
    "/{laundry_id}/reviews",
    response_model=LaundryReviewsResponse,
    summary="Visible reviews with rating stats",
    responses={**ADMIN_RESPONSES, **NOT_FOUND_RESPONSE},
)
@limiter.limit(ADMIN_LIMIT)
async def laundry_reviews_endpoint(
    request: Request,
    laundry_id: str,
    admin: SuperAdmin,
    db: DbSession,
    rating: int | None = Query(default=None, ge=1, le=5),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> LaundryReviewsResponse:
    filters = ReviewFilters(
        rating=rating,
        start=parse_date_param(start_date, "startDate"),
        end=parse_date_param(end_date, "endDate"),
    )
    try:
        return await get_laundry_reviews(db, laundry_id, filters, page, limit)
    except LaundryNotFoundError as e:
        raise _laundry_not_found() from e


@router.get(
    "/{laundry_id}/orders",
    response_model=LaundryOrdersResponse,
    summary="Laundry orders with status summary",
    responses={**ADMIN_RESPONSES, **NOT_FOUND_RESPONSE},
)
@limiter.limit(ADMIN_LIMIT)
async def laundry_orders_endpoint(
    request: Request,
    laundry_id: str,
    admin: SuperAdmin,
    db: DbSession,
    status: OrderStatus | None = Query(default=None),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    search: str | None = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> LaundryOrdersResponse:
    """Search matches order number, customer name and customer email."""
    filters = OrderFilters(
        status=status,
        start=parse_date_param(start_date, "startDate"),
        end=parse_date_param(end_date, "endDate"),
        search=search or None,
    )
    try:
        return await get_laundry_orders(db, laundry_id, filters, page, limit)
    except LaundryNotFoundError as e:
        raise _laundry_not_found() from e


@router.get(
    "/{laundry_id}/activity",
    response_model=LaundryActivityResponse,
    summary="Laundry activity feed grouped by date",
    responses={**ADMIN_RESPONSES, **NOT_FOUND_RESPONSE},
)
@limiter.limit(ADMIN_LIMIT)
async def laundry_activity_endpoint(
    request: Request,
    laundry_id: str,
    admin: SuperAdmin,
    db: DbSession,
    limit: int = Query(default=20, ge=1, le=100),
) -> LaundryActivityResponse:
    try:
        return await get_laundry_activity(db, laundry_id, limit)
    except LaundryNotFoundError as e:
        raise _laundry_not_found() from e
