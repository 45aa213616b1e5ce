"""Laundry management: detail view, profile updates, suspension, activity feed.

Suspension is the only multi-row write in the admin API. It runs inside
the request transaction, so the status change, the order cancellations and
the audit entry commit or roll back together.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.wide_event import set_wide_event_fields
from models import (
    CANCELABLE_ON_SUSPEND,
    Activity,
    ActivityType,
    Laundry,
    LaundryStatus,
    utcnow,
)
from repositories.activity_repository import ActivityRepository
from repositories.laundry_repository import LaundryRepository
from repositories.order_repository import OrderRepository
from repositories.review_repository import ReviewRepository
from schemas import (
    ActivityEntry,
    ActivityGroup,
    ActivityOrderRef,
    ActivitySummary,
    ActivityUser,
    LaundryActivityResponse,
    LaundryDetailResponse,
    LaundryOwner,
    LaundryResponse,
    LaundryUpdateRequest,
    NamedCustomer,
    PerformanceSummary,
    ProductSummary,
    RecentLaundryReview,
    RecentOrder,
    SuspendedLaundry,
    SuspendResponse,
)
from services.aggregation import group_activities_by_date, month_start, round_half_up

logger = get_logger(__name__)

RECENT_ORDERS_LIMIT = 5
RECENT_REVIEWS_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10

# Columns that cannot be cleared through a partial update
_NON_NULLABLE_FIELDS = frozenset({"name", "status", "is_active"})


class LaundryNotFoundError(Exception):
    """Raised when a laundry id does not exist."""

    def __init__(self, laundry_id: str):
        self.laundry_id = laundry_id
        super().__init__(f"Laundry {laundry_id} not found")


class LaundryAlreadySuspendedError(Exception):
    """Raised when suspending a laundry that is already suspended."""

    def __init__(self, laundry_id: str):
        self.laundry_id = laundry_id
        super().__init__(f"Laundry {laundry_id} is already suspended")


class InvalidLaundryUpdateError(Exception):
    """Raised when an update tries to null out a required field."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Fields cannot be null: {', '.join(fields)}")


async def get_laundry_or_raise(db: AsyncSession, laundry_id: str) -> Laundry:
    laundry = await LaundryRepository(db).get_by_id(laundry_id)
    if laundry is None:
        raise LaundryNotFoundError(laundry_id)
    set_wide_event_fields(laundry_id=laundry_id)
    return laundry


async def get_laundry_detail(
    db: AsyncSession, laundry_id: str, now: datetime | None = None
) -> LaundryDetailResponse:
    """Profile, owner, catalog, recent history and a performance summary.

    Raises:
        LaundryNotFoundError: If the laundry does not exist.
    """
    laundries = LaundryRepository(db)
    orders = OrderRepository(db)
    reviews = ReviewRepository(db)

    laundry = await laundries.get_with_owner(laundry_id)
    if laundry is None:
        raise LaundryNotFoundError(laundry_id)
    set_wide_event_fields(laundry_id=laundry_id)

    since = month_start(now or utcnow())

    products = await laundries.list_active_products(laundry_id)
    recent_orders = await orders.list_recent_for_laundry(
        laundry_id, RECENT_ORDERS_LIMIT
    )
    recent_reviews = await reviews.list_recent(laundry_id, RECENT_REVIEWS_LIMIT)
    recent_activity = await ActivityRepository(db).list_for_laundry(
        laundry_id, RECENT_ACTIVITY_LIMIT
    )

    monthly_orders = await orders.count(laundry_id=laundry_id, since=since)
    monthly_revenue = await orders.sum_revenue(laundry_id=laundry_id, since=since)
    total_customers = await orders.count_distinct_customers(laundry_id)
    total_orders = await orders.count(laundry_id=laundry_id)
    average_rating, total_reviews = await reviews.get_rating_summary(laundry_id)
    total_products = await laundries.count_products(laundry_id)

    base = LaundryResponse.model_validate(laundry)
    return LaundryDetailResponse(
        **base.model_dump(),
        owner=LaundryOwner.model_validate(laundry.owner),
        products=[ProductSummary.model_validate(p) for p in products],
        recent_orders=[
            RecentOrder(
                id=order.id,
                order_number=order.order_number,
                status=order.status,
                final_amount=order.final_amount,
                created_at=order.created_at,
                customer=NamedCustomer(
                    name=order.customer.name, email=order.customer.email
                ),
            )
            for order in recent_orders
        ],
        recent_reviews=[
            RecentLaundryReview(
                id=review.id,
                rating=review.rating,
                comment=review.comment,
                created_at=review.created_at,
                customer=NamedCustomer(name=review.customer.name),
            )
            for review in recent_reviews
        ],
        recent_activity=[
            ActivitySummary(
                id=activity.id,
                type=activity.type.value,
                title=activity.title,
                description=activity.description,
                created_at=activity.created_at,
            )
            for activity in recent_activity
        ],
        performance_summary=PerformanceSummary(
            monthly_orders=monthly_orders,
            monthly_revenue=round_half_up(monthly_revenue, 2),
            total_customers=total_customers,
            average_rating=round_half_up(average_rating or 0, 1),
            total_orders=total_orders,
            total_reviews=total_reviews,
            total_products=total_products,
        ),
    )


async def update_laundry(
    db: AsyncSession,
    laundry_id: str,
    changes: LaundryUpdateRequest,
    admin_id: str,
) -> LaundryResponse:
    """Apply the fields present in ``changes`` and log a LAUNDRY_UPDATED entry.

    Raises:
        LaundryNotFoundError: If the laundry does not exist.
        InvalidLaundryUpdateError: If a required field is set to null.
    """
    laundry = await get_laundry_or_raise(db, laundry_id)

    values = changes.model_dump(exclude_unset=True)
    nulled = sorted(
        f for f in _NON_NULLABLE_FIELDS if f in values and values[f] is None
    )
    if nulled:
        raise InvalidLaundryUpdateError(nulled)

    laundry = await LaundryRepository(db).update_fields(laundry, values)

    await ActivityRepository(db).create(
        activity_type=ActivityType.LAUNDRY_UPDATED,
        title="Laundry Updated",
        description=f'Laundry "{laundry.name}" details were updated by super admin',
        laundry_id=laundry.id,
        user_id=admin_id,
        details={"fields": sorted(values)},
    )

    logger.info(
        "laundry.updated",
        laundry_id=laundry.id,
        admin_id=admin_id,
        fields=sorted(values),
    )
    return LaundryResponse.model_validate(laundry)


async def suspend_laundry(
    db: AsyncSession,
    laundry_id: str,
    admin_id: str,
    reason: str | None = None,
) -> SuspendResponse:
    """Suspend a laundry and cancel its not-yet-started orders.

    Sets status SUSPENDED and is_active False, cancels PENDING and
    CONFIRMED orders, and appends exactly one LAUNDRY_SUSPENDED activity.

    Raises:
        LaundryNotFoundError: If the laundry does not exist.
        LaundryAlreadySuspendedError: If it is already suspended. Nothing
            is changed in that case.
    """
    laundries = LaundryRepository(db)
    laundry = await laundries.get_with_owner(laundry_id)
    if laundry is None:
        raise LaundryNotFoundError(laundry_id)
    if laundry.status == LaundryStatus.SUSPENDED:
        raise LaundryAlreadySuspendedError(laundry_id)

    previous_status = laundry.status
    owner_email = laundry.owner.email if laundry.owner else None
    suspended_at = utcnow()

    laundry = await laundries.suspend(laundry)
    canceled = await OrderRepository(db).cancel_for_laundry(
        laundry_id, CANCELABLE_ON_SUSPEND
    )

    await ActivityRepository(db).create(
        activity_type=ActivityType.LAUNDRY_SUSPENDED,
        title="Laundry Suspended",
        description=(
            f'Laundry "{laundry.name}" has been suspended. '
            f"Reason: {reason or 'No reason provided'}"
        ),
        laundry_id=laundry.id,
        user_id=admin_id,
        details={
            "reason": reason,
            "suspendedBy": admin_id,
            "suspendedAt": suspended_at.isoformat(),
            "previousStatus": previous_status.value,
            "canceledOrders": canceled,
        },
    )

    set_wide_event_fields(laundry_id=laundry.id, canceled_orders=canceled)
    # Owner notification is out of band; the owner email is logged for follow-up
    logger.info(
        "laundry.suspended",
        laundry_id=laundry.id,
        admin_id=admin_id,
        owner_email=owner_email,
        previous_status=previous_status.value,
        canceled_orders=canceled,
    )

    return SuspendResponse(
        laundry=SuspendedLaundry(
            id=laundry.id,
            name=laundry.name,
            status=laundry.status,
            is_active=laundry.is_active,
            suspended_at=suspended_at,
        ),
        canceled_orders=canceled,
    )


def _activity_entry(activity: Activity) -> ActivityEntry:
    user = activity.user
    order = activity.order
    return ActivityEntry(
        id=activity.id,
        type=activity.type.value,
        title=activity.title,
        description=activity.description,
        user=(
            ActivityUser(
                id=user.id, name=user.name, email=user.email, role=user.role.value
            )
            if user
            else None
        ),
        order=(
            ActivityOrderRef(
                order_number=order.order_number,
                customer_name=order.customer.name if order.customer else None,
            )
            if order
            else None
        ),
        metadata=activity.details,
        created_at=activity.created_at,
    )


async def get_laundry_activity(
    db: AsyncSession, laundry_id: str, limit: int = 20
) -> LaundryActivityResponse:
    """Latest ``limit`` activities grouped by UTC date, newest date first.

    Raises:
        LaundryNotFoundError: If the laundry does not exist.
    """
    await get_laundry_or_raise(db, laundry_id)

    activities = await ActivityRepository(db).list_for_laundry(laundry_id, limit)
    groups = group_activities_by_date(activities)

    return LaundryActivityResponse(
        activities=[
            ActivityGroup(date=day, activities=[_activity_entry(a) for a in entries])
            for day, entries in groups
        ],
        total_count=len(activities),
    )
