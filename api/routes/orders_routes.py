"""Cross-laundry order endpoints."""

from fastapi import APIRouter, HTTPException, Query, Request

from core.auth import SuperAdmin
from core.database import DbSession
from core.ratelimit import ADMIN_LIMIT, limiter
from models import OrderStatus
from repositories.order_repository import OrderFilters
from routes.utils import ADMIN_RESPONSES, NOT_FOUND_RESPONSE
from schemas import AdminOrdersResponse, OrderDetailResponse
from services.orders_service import (
    OrderNotFoundError,
    get_order_detail,
    list_orders,
)

router = APIRouter(prefix="/api/admin/orders", tags=["orders"])


@router.get(
    "",
    response_model=AdminOrdersResponse,
    summary="All orders with platform statistics",
    responses=ADMIN_RESPONSES,
)
@limiter.limit(ADMIN_LIMIT)
async def list_orders_endpoint(
    request: Request,
    admin: SuperAdmin,
    db: DbSession,
    search: str | None = Query(default=None, max_length=200),
    status: OrderStatus | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> AdminOrdersResponse:
    """Search matches order number, customer name or email, and laundry name."""
    filters = OrderFilters(status=status, search=search or None)
    return await list_orders(db, filters, page, limit)


@router.get(
    "/{order_id}",
    response_model=OrderDetailResponse,
    summary="Order detail with activity timeline",
    responses={**ADMIN_RESPONSES, **NOT_FOUND_RESPONSE},
)
@limiter.limit(ADMIN_LIMIT)
async def order_detail_endpoint(
    request: Request,
    order_id: str,
    admin: SuperAdmin,
    db: DbSession,
) -> OrderDetailResponse:
    try:
        return await get_order_detail(db, order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail="Order not found") from e
