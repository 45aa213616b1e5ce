"""Repository for review queries."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models import Review
from repositories.utils import log_slow_query
from services.aggregation import ReviewFact


@dataclass
class ReviewFilters:
    """Filters for the visible-review listing. ``end`` is inclusive."""

    rating: int | None = None
    start: datetime | None = None
    end: datetime | None = None


class ReviewRepository:
    """Repository for Review database operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @log_slow_query("list_visible_reviews")
    async def list_visible(
        self,
        laundry_id: str,
        filters: ReviewFilters,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Review], int]:
        """Page of visible reviews, newest first, plus the filtered total."""
        conditions = _visible_conditions(laundry_id, filters)

        count_result = await self.db.execute(
            select(func.count()).select_from(Review).where(*conditions)
        )
        total = count_result.scalar_one() or 0

        result = await self.db.execute(
            select(Review)
            .where(*conditions)
            .options(selectinload(Review.customer))
            .order_by(Review.created_at.desc(), Review.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    @log_slow_query("get_visible_rating_counts")
    async def get_visible_rating_counts(self, laundry_id: str) -> dict[int, int]:
        """``{rating: count}`` over every visible review of the laundry."""
        result = await self.db.execute(
            select(Review.rating, func.count())
            .where(Review.laundry_id == laundry_id, Review.is_visible.is_(True))
            .group_by(Review.rating)
        )
        return {row[0]: row[1] for row in result.all()}

    async def list_recent(self, laundry_id: str, limit: int) -> list[Review]:
        result = await self.db.execute(
            select(Review)
            .where(Review.laundry_id == laundry_id)
            .options(selectinload(Review.customer))
            .order_by(Review.created_at.desc(), Review.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    @log_slow_query("get_review_facts")
    async def get_facts_since(
        self, laundry_id: str, since: datetime
    ) -> list[ReviewFact]:
        result = await self.db.execute(
            select(Review.created_at, Review.rating).where(
                Review.laundry_id == laundry_id, Review.created_at >= since
            )
        )
        return [ReviewFact(created_at=row[0], rating=row[1]) for row in result.all()]

    async def get_rating_summary(self, laundry_id: str) -> tuple[float | None, int]:
        """Mean rating (None without reviews) and review count, all reviews."""
        result = await self.db.execute(
            select(func.avg(Review.rating), func.count(Review.id)).where(
                Review.laundry_id == laundry_id
            )
        )
        avg, count = result.one()
        return (float(avg) if avg is not None else None), count

    @log_slow_query("get_leaderboard_review_stats")
    async def get_rating_summaries(
        self, laundry_ids: Sequence[str]
    ) -> dict[str, tuple[float | None, int]]:
        """Per-laundry mean rating and review count for a page of laundries."""
        if not laundry_ids:
            return {}
        result = await self.db.execute(
            select(Review.laundry_id, func.avg(Review.rating), func.count(Review.id))
            .where(Review.laundry_id.in_(laundry_ids))
            .group_by(Review.laundry_id)
        )
        return {
            row[0]: ((float(row[1]) if row[1] is not None else None), row[2])
            for row in result.all()
        }


def _visible_conditions(
    laundry_id: str, filters: ReviewFilters
) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = [
        Review.laundry_id == laundry_id,
        Review.is_visible.is_(True),
    ]
    if filters.rating is not None:
        conditions.append(Review.rating == filters.rating)
    if filters.start is not None:
        conditions.append(Review.created_at >= filters.start)
    if filters.end is not None:
        conditions.append(Review.created_at <= filters.end)
    return conditions
