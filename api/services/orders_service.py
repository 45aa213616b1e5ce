"""Cross-laundry order management: filtered listing and order detail."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core.wide_event import set_wide_event_fields
from models import Address, Order, User, utcnow
from repositories.activity_repository import ActivityRepository
from repositories.order_repository import OrderFilters, OrderRepository
from schemas import (
    AddressSummary,
    AdminOrderItem,
    AdminOrdersResponse,
    CustomerContact,
    DeliveryAddress,
    DetailCustomer,
    DetailLaundry,
    DetailLineItem,
    DetailProduct,
    OrderDetailResponse,
    OrderLaundryRef,
    OrderLineItem,
    OrderStatistics,
    PaginationInfo,
    StatusRevenue,
    TimelineEntry,
    TimelineUser,
)
from services.aggregation import (
    Pagination,
    day_start,
    page_offset,
    paginate,
    status_revenue_summary,
)

UNKNOWN_PRODUCT = "Unknown Product"


class OrderNotFoundError(Exception):
    """Raised when an order id does not exist."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


def pagination_info(pagination: Pagination) -> PaginationInfo:
    return PaginationInfo(
        current_page=pagination.current_page,
        total_pages=pagination.total_pages,
        total_count=pagination.total_count,
        has_next=pagination.has_next,
        has_prev=pagination.has_prev,
    )


def customer_contact(user: User) -> CustomerContact:
    return CustomerContact(
        id=user.id, name=user.name, email=user.email, phone=user.phone
    )


def address_summary(address: Address | None) -> AddressSummary | None:
    if address is None:
        return None
    return AddressSummary(
        street=address.street,
        city=address.city,
        state=address.state,
        zip_code=address.zip_code,
    )


def line_items(order: Order) -> list[OrderLineItem]:
    return [
        OrderLineItem(
            id=item.id,
            product=item.product.name if item.product else UNKNOWN_PRODUCT,
            category=item.product.category if item.product else None,
            quantity=item.quantity,
            price=item.price,
            total=item.total,
            notes=item.notes,
        )
        for item in order.items
    ]


def order_summary_fields(order: Order) -> dict:
    """Fields shared by the per-laundry and global order listings."""
    return {
        "id": order.id,
        "order_number": order.order_number,
        "customer": customer_contact(order.customer),
        "status": order.status,
        "total_amount": order.total_amount,
        "delivery_fee": order.delivery_fee,
        "discount": order.discount,
        "final_amount": order.final_amount,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status.value,
        "items": line_items(order),
        "notes": order.notes,
        "pickup_date": order.pickup_date,
        "delivery_date": order.delivery_date,
        "estimated_delivery": order.estimated_delivery,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


async def list_orders(
    db: AsyncSession,
    filters: OrderFilters,
    page: int,
    limit: int,
    now: datetime | None = None,
) -> AdminOrdersResponse:
    """Filtered, paginated orders across all laundries with platform statistics.

    Statistics always cover every order, regardless of the filters.
    """
    orders = OrderRepository(db)

    rows, total = await orders.list_all(
        filters, offset=page_offset(page, limit), limit=limit
    )
    summary, total_revenue = status_revenue_summary(await orders.get_status_revenue())
    today_orders = await orders.count(since=day_start(now or utcnow()))

    return AdminOrdersResponse(
        orders=[
            AdminOrderItem(
                **order_summary_fields(order),
                laundry=OrderLaundryRef(
                    id=order.laundry.id,
                    name=order.laundry.name,
                    address=order.laundry.address,
                    city=order.laundry.city,
                    phone=order.laundry.phone,
                ),
                delivery_address=address_summary(order.address),
                items_count=len(order.items),
            )
            for order in rows
        ],
        pagination=pagination_info(paginate(page, limit, total)),
        statistics=OrderStatistics(
            status_summary={
                status: StatusRevenue(count=item.count, revenue=item.revenue)
                for status, item in summary.items()
            },
            today_orders=today_orders,
            total_revenue=total_revenue,
        ),
    )


async def get_order_detail(db: AsyncSession, order_id: str) -> OrderDetailResponse:
    """Full order view with items and the activity timeline, newest first.

    Raises:
        OrderNotFoundError: If the order does not exist.
    """
    order = await OrderRepository(db).get_detail(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    set_wide_event_fields(order_id=order_id)

    timeline = await ActivityRepository(db).list_for_order(order_id)

    customer = order.customer
    laundry = order.laundry
    address = order.address

    return OrderDetailResponse(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status.value,
        payment_method=order.payment_method,
        total_amount=order.total_amount,
        delivery_fee=order.delivery_fee,
        discount=order.discount,
        final_amount=order.final_amount,
        customer=DetailCustomer(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            member_since=customer.created_at,
        ),
        laundry=DetailLaundry.model_validate(laundry),
        delivery_address=(
            DeliveryAddress(
                street=address.street,
                city=address.city,
                state=address.state,
                zip_code=address.zip_code,
                country=address.country,
                instructions=address.instructions,
            )
            if address
            else None
        ),
        items=[
            DetailLineItem(
                id=item.id,
                product=(
                    DetailProduct(
                        id=item.product.id,
                        name=item.product.name,
                        description=item.product.description,
                        category=item.product.category,
                        unit_price=item.product.price,
                    )
                    if item.product
                    else None
                ),
                quantity=item.quantity,
                price=item.price,
                total=item.total,
                notes=item.notes,
            )
            for item in order.items
        ],
        notes=order.notes,
        pickup_date=order.pickup_date,
        delivery_date=order.delivery_date,
        estimated_delivery=order.estimated_delivery,
        created_at=order.created_at,
        updated_at=order.updated_at,
        timeline=[
            TimelineEntry(
                id=activity.id,
                type=activity.type.value,
                title=activity.title,
                description=activity.description,
                user=(
                    TimelineUser(name=activity.user.name, role=activity.user.role.value)
                    if activity.user
                    else None
                ),
                metadata=activity.details,
                created_at=activity.created_at,
            )
            for activity in timeline
        ],
    )
