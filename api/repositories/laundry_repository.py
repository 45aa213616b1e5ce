"""Repository for laundry and product operations."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models import Laundry, LaundryStatus, Product
from repositories.utils import log_slow_query

# Leaderboard sort keys mapped to the cached laundry column they order by.
# "customers" is derived per page, so the database only orders by id.
LEADERBOARD_SORT_COLUMNS = {
    "ordersMonth": Laundry.total_orders,
    "revenue": Laundry.total_revenue,
    "rating": Laundry.rating,
}

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "email",
        "phone",
        "address",
        "city",
        "state",
        "zip_code",
        "country",
        "operating_hours",
        "status",
        "is_active",
    }
)


class LaundryRepository:
    """Repository for Laundry database operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, laundry_id: str) -> Laundry | None:
        return await self.db.get(Laundry, laundry_id)

    @log_slow_query("get_laundry_with_owner")
    async def get_with_owner(self, laundry_id: str) -> Laundry | None:
        result = await self.db.execute(
            select(Laundry)
            .where(Laundry.id == laundry_id)
            .options(selectinload(Laundry.owner))
        )
        return result.scalar_one_or_none()

    @log_slow_query("count_active_laundries")
    async def count_active(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Laundry).where(Laundry.is_active.is_(True))
        )
        return result.scalar_one() or 0

    @log_slow_query("list_active_laundries_page")
    async def list_active_page(
        self,
        *,
        sort_by: str,
        descending: bool,
        offset: int,
        limit: int,
    ) -> list[Laundry]:
        """One page of active laundries in leaderboard order.

        Unknown sort keys fall back to total orders descending.
        """
        if sort_by == "customers":
            order_by: list[Any] = [Laundry.id.asc()]
        elif sort_by in LEADERBOARD_SORT_COLUMNS:
            column = LEADERBOARD_SORT_COLUMNS[sort_by]
            order_by = [column.desc() if descending else column.asc(), Laundry.id]
        else:
            order_by = [Laundry.total_orders.desc(), Laundry.id]

        result = await self.db.execute(
            select(Laundry)
            .where(Laundry.is_active.is_(True))
            .order_by(*order_by)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    @log_slow_query("list_active_products")
    async def list_active_products(self, laundry_id: str) -> list[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.laundry_id == laundry_id, Product.is_active.is_(True))
            .order_by(Product.name)
        )
        return list(result.scalars().all())

    async def count_products(self, laundry_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Product)
            .where(Product.laundry_id == laundry_id)
        )
        return result.scalar_one() or 0

    async def update_fields(self, laundry: Laundry, values: dict[str, Any]) -> Laundry:
        """Apply a partial update. Keys outside UPDATABLE_FIELDS are rejected.

        Note:
            Does NOT commit. Caller owns the transaction.
        """
        unknown = set(values) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        for field, value in values.items():
            setattr(laundry, field, value)
        await self.db.flush()
        await self.db.refresh(laundry)
        return laundry

    async def suspend(self, laundry: Laundry) -> Laundry:
        laundry.status = LaundryStatus.SUSPENDED
        laundry.is_active = False
        await self.db.flush()
        return laundry
