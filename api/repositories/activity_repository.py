"""Repository for the append-only activity log."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models import Activity, ActivityType, Order
from repositories.utils import log_slow_query


class ActivityRepository:
    """Repository for Activity database operations.

    Activities are never updated or deleted once written.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(
        self,
        *,
        activity_type: ActivityType,
        title: str,
        description: str | None = None,
        laundry_id: str | None = None,
        user_id: str | None = None,
        order_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> Activity:
        """Append an activity.

        Note:
            Does NOT commit. Caller owns the transaction.
        """
        activity = Activity(
            type=activity_type,
            title=title,
            description=description,
            laundry_id=laundry_id,
            user_id=user_id,
            order_id=order_id,
            details=details,
        )
        self.db.add(activity)
        await self.db.flush()
        return activity

    @log_slow_query("list_laundry_activities")
    async def list_for_laundry(self, laundry_id: str, limit: int) -> list[Activity]:
        """Newest first, with acting user and order customer loaded."""
        result = await self.db.execute(
            select(Activity)
            .where(Activity.laundry_id == laundry_id)
            .options(
                selectinload(Activity.user),
                selectinload(Activity.order).selectinload(Order.customer),
            )
            .order_by(Activity.created_at.desc(), Activity.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    @log_slow_query("list_order_activities")
    async def list_for_order(self, order_id: str) -> list[Activity]:
        result = await self.db.execute(
            select(Activity)
            .where(Activity.order_id == order_id)
            .options(selectinload(Activity.user))
            .order_by(Activity.created_at.desc(), Activity.id)
        )
        return list(result.scalars().all())
