"""Pure aggregation functions behind the admin analytics endpoints.

Nothing here touches the database or HTTP. Repositories fetch rows, services
pass them through these functions, routes serialize the results.

Conventions:
- All instants are compared in UTC. Naive datetimes (SQLite returns them)
  are treated as UTC.
- Month membership is half-open: ``[start_at, next_start_at)``.
- Rounding is half-up (``floor(x * 10**d + 0.5) / 10**d``), so re-rounding
  a rounded value never changes it.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any, NamedTuple, TypeVar

T = TypeVar("T")

MONTH_ABBR = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

REVENUE_STATUSES = frozenset({"COMPLETED", "DELIVERED"})

RATING_SCALE = (5, 4, 3, 2, 1)


# =========================================================================
# Time helpers
# =========================================================================


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_start(reference: datetime | date) -> datetime:
    """Midnight UTC on the first day of the month containing ``reference``."""
    if isinstance(reference, datetime):
        reference = as_utc(reference)
    return datetime(reference.year, reference.month, 1, tzinfo=UTC)


def previous_month_start(reference: datetime | date) -> datetime:
    current = month_start(reference)
    year, month = _shift_month(current.year, current.month, -1)
    return datetime(year, month, 1, tzinfo=UTC)


def day_start(reference: datetime) -> datetime:
    reference = as_utc(reference)
    return datetime(reference.year, reference.month, reference.day, tzinfo=UTC)


# =========================================================================
# Monthly bucketing
# =========================================================================


@dataclass(frozen=True)
class MonthBucket:
    """One calendar month. ``end`` is the last day of the month."""

    start: date
    end: date
    label: str

    @property
    def start_at(self) -> datetime:
        return datetime(self.start.year, self.start.month, 1, tzinfo=UTC)

    @property
    def next_start_at(self) -> datetime:
        return datetime.combine(self.end + timedelta(days=1), datetime.min.time(), UTC)

    def contains(self, instant: datetime) -> bool:
        instant = as_utc(instant)
        return self.start_at <= instant < self.next_start_at


def build_month_buckets(
    reference: datetime | date, months: int = 12
) -> list[MonthBucket]:
    """Return ``months`` contiguous calendar months ending with ``reference``'s.

    Ordered oldest first. Year boundaries are handled by month arithmetic,
    so January minus one month is December of the previous year.

    Raises:
        ValueError: If months < 1.
    """
    if months < 1:
        raise ValueError("months must be at least 1")

    if isinstance(reference, datetime):
        reference = as_utc(reference)

    buckets: list[MonthBucket] = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(reference.year, reference.month, -offset)
        next_year, next_month = _shift_month(year, month, 1)
        start = date(year, month, 1)
        end = date(next_year, next_month, 1) - timedelta(days=1)
        buckets.append(
            MonthBucket(start=start, end=end, label=f"{MONTH_ABBR[month - 1]} {year}")
        )
    return buckets


def bucket_index_for(buckets: Sequence[MonthBucket], instant: datetime) -> int | None:
    """Index of the bucket containing ``instant``, or None if outside all."""
    instant = as_utc(instant)
    for index, bucket in enumerate(buckets):
        if bucket.contains(instant):
            return index
    return None


# =========================================================================
# Rounding and growth
# =========================================================================


def round_half_up(value: float, digits: int = 2) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def growth_rate(current: float, previous: float) -> float:
    """Percent change from ``previous`` to ``current``, 2 dp.

    Growth from zero is reported as 0, whatever ``current`` is.
    """
    if previous == 0:
        return 0
    return round_half_up((current - previous) / previous * 100, 2)


# =========================================================================
# Per-month rollup
# =========================================================================


class OrderFact(NamedTuple):
    """The order columns the monthly rollup needs."""

    created_at: datetime
    status: str
    final_amount: float
    customer_id: str


class ReviewFact(NamedTuple):
    created_at: datetime
    rating: int


@dataclass
class MonthRollup:
    label: str
    start: date
    end: date
    orders: int = 0
    revenue: float = 0.0
    completed_orders: int = 0
    avg_rating: float = 0.0
    customers: int = 0
    completion_rate: int = 0


@dataclass
class PerformanceOverview:
    total_orders: int
    total_revenue: float
    avg_completion_rate: float
    current_rating: float


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


def rollup_months(
    buckets: Sequence[MonthBucket],
    orders: Iterable[OrderFact],
    reviews: Iterable[ReviewFact],
) -> list[MonthRollup]:
    """Compute per-month order, revenue, rating and customer metrics.

    Every metric uses the same membership test, so an order on the last
    day of a month counts toward that month for all of them.
    """
    order_counts = [0] * len(buckets)
    completed = [0] * len(buckets)
    revenue = [0.0] * len(buckets)
    customers: list[set[str]] = [set() for _ in buckets]
    rating_sums = [0] * len(buckets)
    rating_counts = [0] * len(buckets)

    for order in orders:
        index = bucket_index_for(buckets, order.created_at)
        if index is None:
            continue
        order_counts[index] += 1
        customers[index].add(order.customer_id)
        if _status_value(order.status) in REVENUE_STATUSES:
            completed[index] += 1
            revenue[index] += order.final_amount or 0.0

    for review in reviews:
        index = bucket_index_for(buckets, review.created_at)
        if index is None:
            continue
        rating_sums[index] += review.rating
        rating_counts[index] += 1

    rollups: list[MonthRollup] = []
    for index, bucket in enumerate(buckets):
        count = order_counts[index]
        rollups.append(
            MonthRollup(
                label=bucket.label,
                start=bucket.start,
                end=bucket.end,
                orders=count,
                revenue=round_half_up(revenue[index], 2),
                completed_orders=completed[index],
                avg_rating=(
                    round_half_up(rating_sums[index] / rating_counts[index], 1)
                    if rating_counts[index]
                    else 0
                ),
                customers=len(customers[index]),
                completion_rate=(
                    int(round_half_up(completed[index] / count * 100, 0))
                    if count
                    else 0
                ),
            )
        )
    return rollups


def summarize_months(
    rollups: Sequence[MonthRollup], current_rating: float | None
) -> PerformanceOverview:
    """Collapse monthly rollups into the performance overview.

    The average completion rate is the plain mean across all months,
    including months with no orders.
    """
    total_orders = sum(r.orders for r in rollups)
    total_revenue = round_half_up(sum(r.revenue for r in rollups), 2)
    if total_orders > 0 and rollups:
        avg_completion = round_half_up(
            sum(r.completion_rate for r in rollups) / len(rollups), 2
        )
    else:
        avg_completion = 0
    return PerformanceOverview(
        total_orders=total_orders,
        total_revenue=total_revenue,
        avg_completion_rate=avg_completion,
        current_rating=current_rating or 0,
    )


# =========================================================================
# Top-N ranking
# =========================================================================


@dataclass
class ProductAggregate:
    product_id: str | None
    name: str | None
    category: str | None
    total_quantity: int
    total_revenue: float
    order_count: int


def _total_revenue(row: Any) -> float:
    return row.total_revenue


def top_n(
    rows: Iterable[T],
    n: int = 5,
    key: Callable[[T], float] | None = None,
) -> list[T]:
    """Highest ``n`` rows by ``key``, descending.

    Ties keep their input order.
    """
    if n <= 0:
        return []
    return sorted(rows, key=key or _total_revenue, reverse=True)[:n]


# =========================================================================
# Rating distribution
# =========================================================================


@dataclass
class RatingDistribution:
    average: float
    total: int
    # (rating, count) for ratings 5 down to 1
    counts: list[tuple[int, int]]


def rating_distribution(
    ratings: Iterable[int] | Mapping[int, int],
) -> RatingDistribution:
    """Dense 5..1 histogram with total and 1 dp mean.

    Accepts raw ratings or a ``{rating: count}`` mapping. Values outside
    1..5 are ignored.
    """
    tally = dict.fromkeys(RATING_SCALE, 0)
    if isinstance(ratings, Mapping):
        for rating, count in ratings.items():
            if rating in tally:
                tally[rating] += count
    else:
        for rating in ratings:
            if rating in tally:
                tally[rating] += 1

    total = sum(tally.values())
    weighted = sum(rating * count for rating, count in tally.items())
    average = round_half_up(weighted / total, 1) if total else 0
    return RatingDistribution(
        average=average,
        total=total,
        counts=[(rating, tally[rating]) for rating in RATING_SCALE],
    )


# =========================================================================
# Pagination
# =========================================================================


@dataclass
class Pagination:
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def paginate(page: int, limit: int, total_count: int) -> Pagination:
    total_pages = math.ceil(total_count / limit) if limit > 0 else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_count=total_count,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


# =========================================================================
# Leaderboard
# =========================================================================


@dataclass
class LaundryStats:
    """Per-laundry figures gathered for one leaderboard page."""

    orders_month: int = 0
    customers: int = 0
    revenue_month: float = 0.0
    rating_avg: float | None = None
    total_orders: int = 0
    total_reviews: int = 0


@dataclass
class LeaderboardRow:
    id: str
    name: str
    address: str | None
    city: str | None
    status: str
    orders_month: int
    customers: int
    revenue: float
    rating: float
    total_orders: int
    total_reviews: int
    created_at: datetime


def build_leaderboard_row(laundry: Any, stats: LaundryStats) -> LeaderboardRow:
    return LeaderboardRow(
        id=laundry.id,
        name=laundry.name,
        address=laundry.address,
        city=laundry.city,
        status=_status_value(laundry.status),
        orders_month=stats.orders_month,
        customers=stats.customers,
        revenue=round_half_up(stats.revenue_month, 2),
        rating=round_half_up(stats.rating_avg or 0, 1),
        total_orders=stats.total_orders,
        total_reviews=stats.total_reviews,
        created_at=laundry.created_at,
    )


def sort_by_customers(
    rows: Sequence[LeaderboardRow], descending: bool = True
) -> list[LeaderboardRow]:
    """Reorder one fetched page by distinct customer count.

    Only the rows passed in are reordered. Rows on other pages are never
    considered.
    """
    return sorted(rows, key=lambda row: row.customers, reverse=descending)


# =========================================================================
# Status summaries
# =========================================================================


@dataclass
class StatusRevenue:
    count: int
    revenue: float


def status_summary(rows: Iterable[tuple[Any, int]]) -> dict[str, int]:
    """``{STATUS: count}`` for the statuses present in ``rows``."""
    return {_status_value(status): count for status, count in rows}


def status_revenue_summary(
    rows: Iterable[tuple[Any, int, float | None]],
) -> tuple[dict[str, StatusRevenue], float]:
    """Per-status count and revenue, plus the sum of revenue over all statuses."""
    summary = {
        _status_value(status): StatusRevenue(
            count=count, revenue=round_half_up(revenue or 0.0, 2)
        )
        for status, count, revenue in rows
    }
    total = round_half_up(sum(item.revenue for item in summary.values()), 2)
    return summary, total


# =========================================================================
# Activity feed grouping
# =========================================================================


def _created_at(entry: Any) -> datetime:
    return entry.created_at


def group_activities_by_date(
    entries: Iterable[T],
    created_at: Callable[[T], datetime] | None = None,
) -> list[tuple[str, list[T]]]:
    """Group entries by UTC date (``YYYY-MM-DD``), newest date first.

    Entries keep their input order within a date.
    """
    groups: dict[str, list[T]] = {}
    for entry in entries:
        key = as_utc((created_at or _created_at)(entry)).date().isoformat()
        groups.setdefault(key, []).append(entry)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)
