"""Platform dashboard endpoint."""

from fastapi import APIRouter, Request

from core.auth import SuperAdmin
from core.database import DbSession
from core.ratelimit import ADMIN_LIMIT, limiter
from routes.utils import ADMIN_RESPONSES
from schemas import DashboardOverviewResponse
from services.dashboard_service import get_dashboard_overview

router = APIRouter(prefix="/api/admin/dashboard", tags=["dashboard"])


@router.get(
    "/overview",
    response_model=DashboardOverviewResponse,
    summary="Platform totals and month-over-month growth",
    responses=ADMIN_RESPONSES,
)
@limiter.limit(ADMIN_LIMIT)
async def dashboard_overview_endpoint(
    request: Request,
    admin: SuperAdmin,
    db: DbSession,
) -> DashboardOverviewResponse:
    """Growth compares this calendar month with the previous one, in UTC."""
    return await get_dashboard_overview(db)
