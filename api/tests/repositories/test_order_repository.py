"""Tests for OrderRepository."""

from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models import CANCELABLE_ON_SUSPEND, OrderStatus
from repositories.order_repository import OrderFilters, OrderRepository
from tests.factories import (
    LaundryFactory,
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    UserFactory,
    create_async,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


async def _setup(db: AsyncSession, name: str = "Suds"):
    customer = await create_async(
        UserFactory, db, name="Linus Pauling", email=f"linus-{name}@example.com"
    )
    laundry = await create_async(
        LaundryFactory, db, owner_id=customer.id, name=name
    )
    return customer, laundry


async def _order(db: AsyncSession, laundry, customer, **kwargs):
    return await create_async(
        OrderFactory, db, laundry_id=laundry.id, customer_id=customer.id, **kwargs
    )


@pytest.mark.integration
class TestCountersAndSums:
    async def test_count_window_is_half_open(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        await _order(db_session, laundry, customer, created_at=_utc(2024, 2, 1))
        await _order(db_session, laundry, customer, created_at=_utc(2024, 3, 1))
        repo = OrderRepository(db_session)

        feb = await repo.count(since=_utc(2024, 2, 1), until=_utc(2024, 3, 1))

        assert feb == 1
        assert await repo.count(laundry_id=laundry.id) == 2

    async def test_revenue_only_counts_completed_and_delivered(
        self, db_session: AsyncSession
    ):
        customer, laundry = await _setup(db_session)
        for status, amount in (
            (OrderStatus.COMPLETED, 10.0),
            (OrderStatus.DELIVERED, 5.5),
            (OrderStatus.PENDING, 100.0),
            (OrderStatus.REFUNDED, 7.0),
        ):
            await _order(
                db_session, laundry, customer, status=status, final_amount=amount
            )

        assert await OrderRepository(db_session).sum_revenue() == 15.5

    async def test_revenue_without_orders_is_zero(self, db_session: AsyncSession):
        assert await OrderRepository(db_session).sum_revenue() == 0.0

    async def test_distinct_customers(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        other = await create_async(UserFactory, db_session)
        await _order(db_session, laundry, customer)
        await _order(db_session, laundry, customer)
        await _order(db_session, laundry, other)

        assert await OrderRepository(db_session).count_distinct_customers(
            laundry.id
        ) == 2


@pytest.mark.integration
class TestTopProducts:
    async def test_groups_items_of_revenue_orders(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        shirt = await create_async(
            ProductFactory, db_session, laundry_id=laundry.id, name="Shirt"
        )
        duvet = await create_async(
            ProductFactory, db_session, laundry_id=laundry.id, name="Duvet"
        )
        done = await _order(db_session, laundry, customer, status=OrderStatus.COMPLETED)
        open_ = await _order(db_session, laundry, customer, status=OrderStatus.PENDING)
        for order, product, quantity, price in (
            (done, shirt, 3, 2.0),
            (done, duvet, 1, 15.0),
            (open_, shirt, 50, 2.0),
        ):
            await create_async(
                OrderItemFactory,
                db_session,
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                price=price,
            )

        top = await OrderRepository(db_session).get_top_products(laundry.id)

        assert [p.name for p in top] == ["Duvet", "Shirt"]
        assert top[1].total_quantity == 3
        assert top[1].total_revenue == 6.0
        assert top[1].order_count == 1


@pytest.mark.integration
class TestListings:
    async def test_laundry_listing_filters_and_orders_newest_first(
        self, db_session: AsyncSession
    ):
        customer, laundry = await _setup(db_session)
        old = await _order(db_session, laundry, customer, created_at=_utc(2024, 1, 1))
        new = await _order(db_session, laundry, customer, created_at=_utc(2024, 1, 5))
        await _order(
            db_session,
            laundry,
            customer,
            status=OrderStatus.CANCELED,
            created_at=_utc(2024, 1, 3),
        )

        rows, total = await OrderRepository(db_session).list_for_laundry(
            laundry.id,
            OrderFilters(status=OrderStatus.PENDING),
            offset=0,
            limit=10,
        )

        assert total == 2
        assert [o.id for o in rows] == [new.id, old.id]

    async def test_end_date_is_inclusive(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        await _order(db_session, laundry, customer, created_at=_utc(2024, 1, 5))

        _, total = await OrderRepository(db_session).list_for_laundry(
            laundry.id,
            OrderFilters(start=_utc(2024, 1, 1), end=_utc(2024, 1, 5)),
            offset=0,
            limit=10,
        )

        assert total == 1

    async def test_search_treats_wildcards_literally(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        await _order(db_session, laundry, customer, order_number="ORD-100%")
        await _order(db_session, laundry, customer, order_number="ORD-1000")

        rows, total = await OrderRepository(db_session).list_for_laundry(
            laundry.id, OrderFilters(search="100%"), offset=0, limit=10
        )

        assert total == 1
        assert rows[0].order_number == "ORD-100%"

    async def test_global_search_matches_laundry_name(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session, name="Fluffy Towels")
        other_customer, other = await _setup(db_session, name="Crisp Collars")
        await _order(db_session, laundry, customer)
        await _order(db_session, other, other_customer)

        rows, total = await OrderRepository(db_session).list_all(
            OrderFilters(search="fluffy"), offset=0, limit=10
        )

        assert total == 1
        assert rows[0].laundry.name == "Fluffy Towels"

    async def test_status_revenue_spans_all_statuses(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        await _order(db_session, laundry, customer, status=OrderStatus.CANCELED)
        await _order(db_session, laundry, customer, status=OrderStatus.CANCELED)

        rows = await OrderRepository(db_session).get_status_revenue()

        assert rows == [(OrderStatus.CANCELED, 2, 50.0)]


@pytest.mark.integration
class TestLeaderboardStats:
    async def test_month_figures_per_laundry(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        await _order(
            db_session,
            laundry,
            customer,
            status=OrderStatus.COMPLETED,
            final_amount=40.0,
            created_at=_utc(2024, 6, 3),
        )
        await _order(
            db_session,
            laundry,
            customer,
            status=OrderStatus.PENDING,
            created_at=_utc(2024, 6, 4),
        )
        await _order(db_session, laundry, customer, created_at=_utc(2024, 5, 30))

        stats = await OrderRepository(db_session).get_leaderboard_stats(
            [laundry.id, "no-orders"], _utc(2024, 6, 1)
        )

        assert set(stats) == {laundry.id}
        assert stats[laundry.id].orders_month == 2
        assert stats[laundry.id].revenue_month == 40.0
        assert stats[laundry.id].total_orders == 3
        assert stats[laundry.id].customers == 1

    async def test_empty_page(self, db_session: AsyncSession):
        assert await OrderRepository(db_session).get_leaderboard_stats(
            [], _utc(2024, 6, 1)
        ) == {}


@pytest.mark.integration
class TestCancelForLaundry:
    async def test_cancels_only_matching_statuses(self, db_session: AsyncSession):
        customer, laundry = await _setup(db_session)
        pending = await _order(db_session, laundry, customer)
        confirmed = await _order(
            db_session, laundry, customer, status=OrderStatus.CONFIRMED
        )
        shipped = await _order(
            db_session, laundry, customer, status=OrderStatus.OUT_FOR_DELIVERY
        )

        changed = await OrderRepository(db_session).cancel_for_laundry(
            laundry.id, CANCELABLE_ON_SUSPEND
        )

        assert changed == 2
        assert pending.status == OrderStatus.CANCELED
        assert confirmed.status == OrderStatus.CANCELED
        assert shipped.status == OrderStatus.OUT_FOR_DELIVERY
