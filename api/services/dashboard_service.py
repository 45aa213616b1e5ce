"""Platform-wide dashboard overview."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from models import ACTIVE_STATUSES, utcnow
from repositories.laundry_repository import LaundryRepository
from repositories.order_repository import OrderRepository
from repositories.user_repository import UserRepository
from schemas import DashboardOverviewResponse, ThisMonthStats
from services.aggregation import (
    growth_rate,
    month_start,
    previous_month_start,
    round_half_up,
)


async def get_dashboard_overview(
    db: AsyncSession, now: datetime | None = None
) -> DashboardOverviewResponse:
    """Headline platform counters plus this month's growth vs last month.

    "This month" runs from the first of the current UTC month to now; the
    comparison window is the whole previous calendar month.
    """
    now = now or utcnow()
    this_month = month_start(now)
    last_month = previous_month_start(now)

    laundries = LaundryRepository(db)
    orders = OrderRepository(db)
    users = UserRepository(db)

    total_laundries = await laundries.count_active()
    total_users = await users.count_active_platform_users()
    total_orders = await orders.count()
    platform_revenue = await orders.sum_revenue()
    active_orders = await orders.count(statuses=ACTIVE_STATUSES)

    month_orders = await orders.count(since=this_month)
    month_revenue = await orders.sum_revenue(since=this_month)
    prev_orders = await orders.count(since=last_month, until=this_month)
    prev_revenue = await orders.sum_revenue(since=last_month, until=this_month)

    return DashboardOverviewResponse(
        total_laundries=total_laundries,
        total_users=total_users,
        total_orders=total_orders,
        platform_revenue=round_half_up(platform_revenue, 2),
        active_orders=active_orders,
        this_month=ThisMonthStats(
            orders=month_orders,
            revenue=round_half_up(month_revenue, 2),
            order_growth=growth_rate(month_orders, prev_orders),
            revenue_growth=growth_rate(month_revenue, prev_revenue),
        ),
    )
