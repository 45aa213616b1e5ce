"""Repository for order queries and bulk status changes.

Read methods return ORM rows or plain tuples; aggregation over them happens
in services.aggregation.
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, Select, and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models import (
    REVENUE_STATUSES,
    Laundry,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    User,
    utcnow,
)
from repositories.utils import escape_like, log_slow_query
from services.aggregation import LaundryStats, OrderFact, ProductAggregate


@dataclass
class OrderFilters:
    """Optional filters for order listings. ``end`` is inclusive."""

    status: OrderStatus | None = None
    start: datetime | None = None
    end: datetime | None = None
    search: str | None = None


class OrderRepository:
    """Repository for Order database operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Counters and sums
    # ------------------------------------------------------------------

    @log_slow_query("count_orders")
    async def count(
        self,
        *,
        laundry_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        statuses: Collection[OrderStatus] | None = None,
    ) -> int:
        """Count orders, optionally within ``[since, until)``."""
        stmt = select(func.count()).select_from(Order)
        stmt = _apply_scope(stmt, laundry_id, since, until, statuses)
        result = await self.db.execute(stmt)
        return result.scalar_one() or 0

    @log_slow_query("sum_order_revenue")
    async def sum_revenue(
        self,
        *,
        laundry_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> float:
        """Sum of final amounts over revenue-recognized orders in ``[since, until)``."""
        stmt = select(func.coalesce(func.sum(Order.final_amount), 0.0))
        stmt = _apply_scope(stmt, laundry_id, since, until, REVENUE_STATUSES)
        result = await self.db.execute(stmt)
        return float(result.scalar_one() or 0.0)

    async def count_distinct_customers(self, laundry_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Order.customer_id.distinct())).where(
                Order.laundry_id == laundry_id
            )
        )
        return result.scalar_one() or 0

    # ------------------------------------------------------------------
    # Per-laundry analytics
    # ------------------------------------------------------------------

    @log_slow_query("get_order_facts")
    async def get_facts_since(
        self, laundry_id: str, since: datetime
    ) -> list[OrderFact]:
        """Slim order rows used by the monthly rollup."""
        result = await self.db.execute(
            select(
                Order.created_at,
                Order.status,
                Order.final_amount,
                Order.customer_id,
            ).where(Order.laundry_id == laundry_id, Order.created_at >= since)
        )
        return [
            OrderFact(
                created_at=row.created_at,
                status=row.status.value,
                final_amount=row.final_amount or 0.0,
                customer_id=row.customer_id,
            )
            for row in result.all()
        ]

    @log_slow_query("get_top_products")
    async def get_top_products(
        self, laundry_id: str, limit: int = 5
    ) -> list[ProductAggregate]:
        """Order items of revenue-recognized orders grouped by product.

        Ordered by summed item total, then product id so ties are stable.
        """
        total_sum = func.coalesce(func.sum(OrderItem.total), 0.0)
        result = await self.db.execute(
            select(
                OrderItem.product_id,
                Product.name,
                Product.category,
                func.coalesce(func.sum(OrderItem.quantity), 0).label("quantity"),
                total_sum.label("revenue"),
                func.count(OrderItem.id).label("order_count"),
            )
            .join(Order, OrderItem.order_id == Order.id)
            .outerjoin(Product, OrderItem.product_id == Product.id)
            .where(
                Order.laundry_id == laundry_id,
                Order.status.in_(REVENUE_STATUSES),
            )
            .group_by(OrderItem.product_id, Product.name, Product.category)
            .order_by(total_sum.desc(), OrderItem.product_id)
            .limit(limit)
        )
        return [
            ProductAggregate(
                product_id=row.product_id,
                name=row.name,
                category=row.category,
                total_quantity=int(row.quantity or 0),
                total_revenue=float(row.revenue or 0.0),
                order_count=row.order_count,
            )
            for row in result.all()
        ]

    @log_slow_query("get_status_counts")
    async def get_status_counts(self, laundry_id: str) -> list[tuple[OrderStatus, int]]:
        result = await self.db.execute(
            select(Order.status, func.count())
            .where(Order.laundry_id == laundry_id)
            .group_by(Order.status)
        )
        return [(row[0], row[1]) for row in result.all()]

    @log_slow_query("list_laundry_orders")
    async def list_for_laundry(
        self,
        laundry_id: str,
        filters: OrderFilters,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Order], int]:
        """Filtered page of a laundry's orders, newest first, plus total count."""
        conditions = [Order.laundry_id == laundry_id, *_filter_conditions(filters)]
        return await self._page(conditions, bool(filters.search), offset, limit)

    async def list_recent_for_laundry(
        self, laundry_id: str, limit: int = 5
    ) -> list[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.laundry_id == laundry_id)
            .options(selectinload(Order.customer))
            .order_by(Order.created_at.desc(), Order.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Leaderboard
    # ------------------------------------------------------------------

    @log_slow_query("get_leaderboard_order_stats")
    async def get_leaderboard_stats(
        self, laundry_ids: Sequence[str], month_start: datetime
    ) -> dict[str, LaundryStats]:
        """Order-derived leaderboard figures for a page of laundries.

        One grouped query for the whole page. Laundries without orders are
        absent from the result.
        """
        if not laundry_ids:
            return {}

        in_month = Order.created_at >= month_start
        result = await self.db.execute(
            select(
                Order.laundry_id,
                func.count(Order.id).label("total_orders"),
                func.count(Order.customer_id.distinct()).label("customers"),
                func.coalesce(func.sum(case((in_month, 1), else_=0)), 0).label(
                    "orders_month"
                ),
                func.coalesce(
                    func.sum(
                        case(
                            (
                                and_(in_month, Order.status.in_(REVENUE_STATUSES)),
                                Order.final_amount,
                            ),
                            else_=0.0,
                        )
                    ),
                    0.0,
                ).label("revenue_month"),
            )
            .where(Order.laundry_id.in_(laundry_ids))
            .group_by(Order.laundry_id)
        )
        return {
            row.laundry_id: LaundryStats(
                orders_month=int(row.orders_month or 0),
                customers=row.customers,
                revenue_month=float(row.revenue_month or 0.0),
                total_orders=row.total_orders,
            )
            for row in result.all()
        }

    # ------------------------------------------------------------------
    # Global order management
    # ------------------------------------------------------------------

    @log_slow_query("list_all_orders")
    async def list_all(
        self,
        filters: OrderFilters,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Order], int]:
        """Filtered page across all laundries. Search also matches laundry name."""
        conditions = _filter_conditions(filters, include_laundry_name=True)
        return await self._page(
            conditions,
            bool(filters.search),
            offset,
            limit,
            join_laundry=bool(filters.search),
        )

    @log_slow_query("get_status_revenue")
    async def get_status_revenue(
        self,
    ) -> list[tuple[OrderStatus, int, float]]:
        """Count and summed final amount per status, across every status."""
        result = await self.db.execute(
            select(
                Order.status,
                func.count(Order.id),
                func.coalesce(func.sum(Order.final_amount), 0.0),
            ).group_by(Order.status)
        )
        return [(row[0], row[1], float(row[2] or 0.0)) for row in result.all()]

    @log_slow_query("get_order_detail")
    async def get_detail(self, order_id: str) -> Order | None:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.customer),
                selectinload(Order.laundry),
                selectinload(Order.address),
                selectinload(Order.items).selectinload(OrderItem.product),
            )
        )
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @log_slow_query("cancel_laundry_orders")
    async def cancel_for_laundry(
        self, laundry_id: str, statuses: Collection[OrderStatus]
    ) -> int:
        """Set every matching order of the laundry to CANCELED.

        Returns:
            Number of orders changed.

        Note:
            Does NOT commit. Caller owns the transaction.
        """
        result = await self.db.execute(
            update(Order)
            .where(Order.laundry_id == laundry_id, Order.status.in_(statuses))
            .values(status=OrderStatus.CANCELED, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    # ------------------------------------------------------------------

    async def _page(
        self,
        conditions: list[ColumnElement[bool]],
        join_customer: bool,
        offset: int,
        limit: int,
        *,
        join_laundry: bool = False,
    ) -> tuple[list[Order], int]:
        count_stmt = select(func.count(Order.id)).select_from(Order)
        list_stmt = select(Order)
        if join_customer:
            count_stmt = count_stmt.join(User, Order.customer_id == User.id)
            list_stmt = list_stmt.join(User, Order.customer_id == User.id)
        if join_laundry:
            count_stmt = count_stmt.join(Laundry, Order.laundry_id == Laundry.id)
            list_stmt = list_stmt.join(Laundry, Order.laundry_id == Laundry.id)

        total = (await self.db.execute(count_stmt.where(*conditions))).scalar_one()

        result = await self.db.execute(
            list_stmt.where(*conditions)
            .options(
                selectinload(Order.customer),
                selectinload(Order.laundry),
                selectinload(Order.address),
                selectinload(Order.items).selectinload(OrderItem.product),
            )
            .order_by(Order.created_at.desc(), Order.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0


def _apply_scope(
    stmt: Select,
    laundry_id: str | None,
    since: datetime | None,
    until: datetime | None,
    statuses: Collection[OrderStatus] | None,
) -> Select:
    if laundry_id is not None:
        stmt = stmt.where(Order.laundry_id == laundry_id)
    if since is not None:
        stmt = stmt.where(Order.created_at >= since)
    if until is not None:
        stmt = stmt.where(Order.created_at < until)
    if statuses is not None:
        stmt = stmt.where(Order.status.in_(statuses))
    return stmt


def _filter_conditions(
    filters: OrderFilters, *, include_laundry_name: bool = False
) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if filters.status is not None:
        conditions.append(Order.status == filters.status)
    if filters.start is not None:
        conditions.append(Order.created_at >= filters.start)
    if filters.end is not None:
        conditions.append(Order.created_at <= filters.end)
    if filters.search:
        pattern = f"%{escape_like(filters.search)}%"
        matches = [
            Order.order_number.ilike(pattern, escape="\\"),
            User.name.ilike(pattern, escape="\\"),
            User.email.ilike(pattern, escape="\\"),
        ]
        if include_laundry_name:
            matches.append(Laundry.name.ilike(pattern, escape="\\"))
        conditions.append(or_(*matches))
    return conditions
