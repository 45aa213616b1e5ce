"""Tests for services.dashboard_service."""

from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models import LaundryStatus, OrderStatus
from services.dashboard_service import get_dashboard_overview
from tests.factories import (
    LaundryFactory,
    OrderFactory,
    SuperAdminFactory,
    UserFactory,
    create_async,
)

NOW = datetime(2024, 3, 20, 12, tzinfo=UTC)


@pytest.mark.integration
class TestDashboardOverview:
    async def test_counts_revenue_and_growth(self, db_session: AsyncSession):
        await create_async(SuperAdminFactory, db_session)
        customer = await create_async(UserFactory, db_session)
        await create_async(UserFactory, db_session, is_active=False)
        laundry = await create_async(LaundryFactory, db_session, owner_id=customer.id)
        await create_async(
            LaundryFactory,
            db_session,
            owner_id=customer.id,
            status=LaundryStatus.SUSPENDED,
            is_active=False,
        )

        def order(status: OrderStatus, amount: float, created_at: datetime):
            return create_async(
                OrderFactory,
                db_session,
                laundry_id=laundry.id,
                customer_id=customer.id,
                status=status,
                final_amount=amount,
                created_at=created_at,
            )

        # Previous month: 2 orders, 50.00 revenue
        await order(OrderStatus.COMPLETED, 50.0, datetime(2024, 2, 10, tzinfo=UTC))
        await order(OrderStatus.CANCELED, 80.0, datetime(2024, 2, 29, 23, tzinfo=UTC))
        # This month: 3 orders, 75.00 revenue
        await order(OrderStatus.DELIVERED, 75.0, datetime(2024, 3, 1, tzinfo=UTC))
        await order(OrderStatus.PENDING, 10.0, datetime(2024, 3, 5, tzinfo=UTC))
        await order(OrderStatus.IN_PROGRESS, 10.0, datetime(2024, 3, 6, tzinfo=UTC))

        result = await get_dashboard_overview(db_session, now=NOW)

        assert result.total_laundries == 1
        assert result.total_users == 1
        assert result.total_orders == 5
        assert result.platform_revenue == 125.0
        assert result.active_orders == 2
        assert result.this_month.orders == 3
        assert result.this_month.revenue == 75.0
        assert result.this_month.order_growth == 50.0
        assert result.this_month.revenue_growth == 50.0

    async def test_empty_platform_reports_zero_growth(self, db_session: AsyncSession):
        result = await get_dashboard_overview(db_session, now=NOW)

        assert result.total_orders == 0
        assert result.this_month.order_growth == 0
        assert result.this_month.revenue_growth == 0
