"""Per-laundry analytics and the cross-laundry leaderboard.

Each function issues its reads one after another on the request session
and hands the rows to services.aggregation. Reads are not wrapped in a
shared snapshot, so figures from different queries may straddle a
concurrent write.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from models import utcnow
from repositories.laundry_repository import LaundryRepository
from repositories.order_repository import OrderFilters, OrderRepository
from repositories.review_repository import ReviewFilters, ReviewRepository
from schemas import (
    LaundryOrderItem,
    LaundryOrdersResponse,
    LaundryPerformanceResponse,
    LaundryReviewsResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    MonthlyPerformance,
    PerformanceOverviewResponse,
    PerformanceReview,
    RatingBucket,
    ReviewItem,
    ReviewStats,
    TopProduct,
    UserRef,
)
from services.aggregation import (
    LaundryStats,
    build_leaderboard_row,
    build_month_buckets,
    month_start,
    page_offset,
    paginate,
    rating_distribution,
    rollup_months,
    round_half_up,
    sort_by_customers,
    status_summary,
    summarize_months,
    top_n,
)
from services.laundry_service import get_laundry_or_raise
from services.orders_service import (
    address_summary,
    order_summary_fields,
    pagination_info,
)

PERFORMANCE_MONTHS = 12
TOP_PRODUCTS_LIMIT = 5
PERFORMANCE_REVIEWS_LIMIT = 10


async def get_laundry_performance(
    db: AsyncSession, laundry_id: str, now: datetime | None = None
) -> LaundryPerformanceResponse:
    """Twelve-month performance, top products and recent reviews.

    Raises:
        LaundryNotFoundError: If the laundry does not exist.
    """
    laundry = await get_laundry_or_raise(db, laundry_id)

    buckets = build_month_buckets(now or utcnow(), PERFORMANCE_MONTHS)
    window_start = buckets[0].start_at

    orders = OrderRepository(db)
    reviews = ReviewRepository(db)

    order_facts = await orders.get_facts_since(laundry_id, window_start)
    review_facts = await reviews.get_facts_since(laundry_id, window_start)
    products = await orders.get_top_products(laundry_id, TOP_PRODUCTS_LIMIT)
    recent = await reviews.list_recent(laundry_id, PERFORMANCE_REVIEWS_LIMIT)

    rollups = rollup_months(buckets, order_facts, review_facts)
    overview = summarize_months(rollups, laundry.rating)

    return LaundryPerformanceResponse(
        overview=PerformanceOverviewResponse(
            total_orders=overview.total_orders,
            total_revenue=overview.total_revenue,
            avg_completion_rate=overview.avg_completion_rate,
            current_rating=overview.current_rating,
        ),
        monthly_data=[
            MonthlyPerformance(
                month=r.label,
                orders=r.orders,
                revenue=r.revenue,
                completed_orders=r.completed_orders,
                avg_rating=r.avg_rating,
                customers=r.customers,
                completion_rate=r.completion_rate,
            )
            for r in rollups
        ],
        top_products=[
            TopProduct(
                product=p.name or "Unknown Product",
                category=p.category or "Unknown",
                total_quantity=p.total_quantity,
                total_revenue=round_half_up(p.total_revenue, 2),
                order_count=p.order_count,
            )
            for p in top_n(products, TOP_PRODUCTS_LIMIT)
        ],
        recent_reviews=[
            PerformanceReview(
                id=review.id,
                rating=review.rating,
                comment=review.comment,
                customer_name=review.customer.name,
                created_at=review.created_at,
            )
            for review in recent
        ],
    )


async def get_laundry_reviews(
    db: AsyncSession,
    laundry_id: str,
    filters: ReviewFilters,
    page: int,
    limit: int,
) -> LaundryReviewsResponse:
    """Visible reviews matching ``filters``, newest first.

    The rating stats ignore the filters and cover every visible review.

    Raises:
        LaundryNotFoundError: If the laundry does not exist.
    """
    await get_laundry_or_raise(db, laundry_id)

    reviews = ReviewRepository(db)
    rows, total = await reviews.list_visible(
        laundry_id, filters, offset=page_offset(page, limit), limit=limit
    )
    rating_counts = await reviews.get_visible_rating_counts(laundry_id)
    distribution = rating_distribution(rating_counts)

    return LaundryReviewsResponse(
        reviews=[
            ReviewItem(
                id=review.id,
                rating=review.rating,
                comment=review.comment,
                customer=UserRef(
                    id=review.customer.id,
                    name=review.customer.name,
                    email=review.customer.email,
                ),
                is_visible=review.is_visible,
                created_at=review.created_at,
                updated_at=review.updated_at,
            )
            for review in rows
        ],
        pagination=pagination_info(paginate(page, limit, total)),
        stats=ReviewStats(
            average_rating=distribution.average,
            total_reviews=distribution.total,
            rating_distribution=[
                RatingBucket(rating=rating, count=count)
                for rating, count in distribution.counts
            ],
        ),
    )


async def get_laundry_orders(
    db: AsyncSession,
    laundry_id: str,
    filters: OrderFilters,
    page: int,
    limit: int,
) -> LaundryOrdersResponse:
    """Filtered page of a laundry's orders with an unfiltered status summary.

    Raises:
        LaundryNotFoundError: If the laundry does not exist.
    """
    await get_laundry_or_raise(db, laundry_id)

    orders = OrderRepository(db)
    rows, total = await orders.list_for_laundry(
        laundry_id, filters, offset=page_offset(page, limit), limit=limit
    )
    summary = status_summary(await orders.get_status_counts(laundry_id))

    return LaundryOrdersResponse(
        orders=[
            LaundryOrderItem(
                **order_summary_fields(order),
                address=address_summary(order.address),
            )
            for order in rows
        ],
        pagination=pagination_info(paginate(page, limit, total)),
        status_summary=summary,
    )


async def get_leaderboard(
    db: AsyncSession,
    sort_by: str,
    sort_order: str,
    page: int,
    limit: int,
    now: datetime | None = None,
) -> LeaderboardResponse:
    """One page of active laundries with this month's performance figures.

    Ordering for ``ordersMonth``, ``revenue`` and ``rating`` uses the
    laundry's cached counters. ``customers`` is computed per laundry, so
    only the fetched page is reordered by it; the page itself is chosen in
    id order.
    """
    descending = sort_order != "asc"
    laundries = LaundryRepository(db)

    page_rows = await laundries.list_active_page(
        sort_by=sort_by,
        descending=descending,
        offset=page_offset(page, limit),
        limit=limit,
    )
    total = await laundries.count_active()

    ids = [laundry.id for laundry in page_rows]
    order_stats = await OrderRepository(db).get_leaderboard_stats(
        ids, month_start(now or utcnow())
    )
    review_stats = await ReviewRepository(db).get_rating_summaries(ids)

    rows = []
    for laundry in page_rows:
        stats = order_stats.get(laundry.id, LaundryStats())
        stats.rating_avg, stats.total_reviews = review_stats.get(laundry.id, (None, 0))
        rows.append(build_leaderboard_row(laundry, stats))

    if sort_by == "customers":
        rows = sort_by_customers(rows, descending=descending)

    return LeaderboardResponse(
        laundries=[
            LeaderboardEntry(
                id=row.id,
                name=row.name,
                address=row.address,
                city=row.city,
                status=row.status,
                orders_month=row.orders_month,
                customers=row.customers,
                revenue=row.revenue,
                rating=row.rating,
                total_orders=row.total_orders,
                total_reviews=row.total_reviews,
                created_at=row.created_at,
            )
            for row in rows
        ],
        pagination=pagination_info(paginate(page, limit, total)),
    )
