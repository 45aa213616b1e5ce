"""Pydantic schemas for API request/response validation.

Every payload is serialized with camelCase keys; Python attributes stay
snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import LaundryStatus, OrderStatus


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    error: str


# =========================================================================
# Health
# =========================================================================


class HealthResponse(BaseModel):
    status: str
    service: str


class PoolStatusResponse(CamelModel):
    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


class DetailedHealthResponse(HealthResponse):
    database: bool
    pool: PoolStatusResponse | None = None


# =========================================================================
# Auth
# =========================================================================


class LoginRequest(BaseModel):
    """Login body. Both fields are checked in the handler so that a missing
    field yields the same 400 message as an empty one."""

    email: str | None = None
    password: str | None = None


class LoginUser(CamelModel):
    id: str
    email: str
    name: str | None
    role: str


class LoginResponse(CamelModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    user: LoginUser


# =========================================================================
# Shared
# =========================================================================


class PaginationInfo(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class UserRef(CamelModel):
    id: str
    name: str | None
    email: str


class CustomerContact(UserRef):
    phone: str | None = None


class AddressSummary(CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


# =========================================================================
# Dashboard
# =========================================================================


class ThisMonthStats(CamelModel):
    orders: int
    revenue: float
    order_growth: float
    revenue_growth: float


class DashboardOverviewResponse(CamelModel):
    total_laundries: int
    total_users: int
    total_orders: int
    platform_revenue: float
    active_orders: int
    this_month: ThisMonthStats


# =========================================================================
# Laundry leaderboard
# =========================================================================


class LeaderboardEntry(CamelModel):
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


class LeaderboardResponse(CamelModel):
    laundries: list[LeaderboardEntry]
    pagination: PaginationInfo


# =========================================================================
# Laundry detail and management
# =========================================================================


class LaundryOwner(CamelModel):
    id: str
    name: str | None
    email: str
    phone: str | None
    created_at: datetime


class ProductSummary(CamelModel):
    id: str
    name: str
    category: str | None
    price: float


class NamedCustomer(CamelModel):
    name: str | None
    email: str | None = None


class RecentOrder(CamelModel):
    id: str
    order_number: str
    status: OrderStatus
    final_amount: float
    created_at: datetime
    customer: NamedCustomer


class RecentLaundryReview(CamelModel):
    id: str
    rating: int
    comment: str | None
    created_at: datetime
    customer: NamedCustomer


class ActivitySummary(CamelModel):
    id: str
    type: str
    title: str
    description: str | None
    created_at: datetime


class PerformanceSummary(CamelModel):
    monthly_orders: int
    monthly_revenue: float
    total_customers: int
    average_rating: float
    total_orders: int
    total_reviews: int
    total_products: int


class LaundryResponse(CamelModel):
    id: str
    owner_id: str
    name: str
    description: str | None
    email: str | None
    phone: str | None
    address: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    country: str | None
    status: LaundryStatus
    rating: float
    is_active: bool
    total_orders: int
    total_revenue: float
    operating_hours: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime


class LaundryDetailResponse(LaundryResponse):
    owner: LaundryOwner
    products: list[ProductSummary]
    recent_orders: list[RecentOrder]
    recent_reviews: list[RecentLaundryReview]
    recent_activity: list[ActivitySummary]
    performance_summary: PerformanceSummary


class LaundryUpdateRequest(CamelModel):
    """Partial update; only fields present in the body are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)
    operating_hours: dict[str, Any] | None = None
    status: LaundryStatus | None = None
    is_active: bool | None = None


class SuspendRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class SuspendedLaundry(CamelModel):
    id: str
    name: str
    status: LaundryStatus
    is_active: bool
    suspended_at: datetime


class SuspendResponse(CamelModel):
    message: str = "Laundry suspended successfully"
    laundry: SuspendedLaundry
    canceled_orders: int


# =========================================================================
# Laundry performance
# =========================================================================


class PerformanceOverviewResponse(CamelModel):
    total_orders: int
    total_revenue: float
    avg_completion_rate: float
    current_rating: float


class MonthlyPerformance(CamelModel):
    month: str
    orders: int
    revenue: float
    completed_orders: int
    avg_rating: float
    customers: int
    completion_rate: int


class TopProduct(CamelModel):
    product: str
    category: str
    total_quantity: int
    total_revenue: float
    order_count: int


class PerformanceReview(CamelModel):
    id: str
    rating: int
    comment: str | None
    customer_name: str | None
    created_at: datetime


class LaundryPerformanceResponse(CamelModel):
    overview: PerformanceOverviewResponse
    monthly_data: list[MonthlyPerformance]
    top_products: list[TopProduct]
    recent_reviews: list[PerformanceReview]


# =========================================================================
# Laundry reviews
# =========================================================================


class ReviewItem(CamelModel):
    id: str
    rating: int
    comment: str | None
    customer: UserRef
    is_visible: bool
    created_at: datetime
    updated_at: datetime


class RatingBucket(CamelModel):
    rating: int
    count: int


class ReviewStats(CamelModel):
    average_rating: float
    total_reviews: int
    rating_distribution: list[RatingBucket]


class LaundryReviewsResponse(CamelModel):
    reviews: list[ReviewItem]
    pagination: PaginationInfo
    stats: ReviewStats


# =========================================================================
# Orders
# =========================================================================


class OrderLineItem(CamelModel):
    id: str
    product: str
    category: str | None
    quantity: int
    price: float
    total: float
    notes: str | None


class OrderSummaryBase(CamelModel):
    id: str
    order_number: str
    customer: CustomerContact
    status: OrderStatus
    total_amount: float
    delivery_fee: float
    discount: float
    final_amount: float
    payment_method: str | None
    payment_status: str
    items: list[OrderLineItem]
    notes: str | None
    pickup_date: datetime | None
    delivery_date: datetime | None
    estimated_delivery: datetime | None
    created_at: datetime
    updated_at: datetime


class LaundryOrderItem(OrderSummaryBase):
    address: AddressSummary | None


class LaundryOrdersResponse(CamelModel):
    orders: list[LaundryOrderItem]
    pagination: PaginationInfo
    status_summary: dict[str, int]


class OrderLaundryRef(CamelModel):
    id: str
    name: str
    address: str | None
    city: str | None
    phone: str | None


class AdminOrderItem(OrderSummaryBase):
    laundry: OrderLaundryRef
    delivery_address: AddressSummary | None
    items_count: int


class StatusRevenue(CamelModel):
    count: int
    revenue: float


class OrderStatistics(CamelModel):
    status_summary: dict[str, StatusRevenue]
    today_orders: int
    total_revenue: float


class AdminOrdersResponse(CamelModel):
    orders: list[AdminOrderItem]
    pagination: PaginationInfo
    statistics: OrderStatistics


# =========================================================================
# Order detail
# =========================================================================


class DetailCustomer(CustomerContact):
    member_since: datetime


class DetailLaundry(CamelModel):
    id: str
    name: str
    email: str | None
    phone: str | None
    address: str | None
    city: str | None
    state: str | None
    zip_code: str | None


class DeliveryAddress(AddressSummary):
    country: str | None = None
    instructions: str | None = None


class DetailProduct(CamelModel):
    id: str
    name: str
    description: str | None
    category: str | None
    unit_price: float


class DetailLineItem(CamelModel):
    id: str
    product: DetailProduct | None
    quantity: int
    price: float
    total: float
    notes: str | None


class TimelineUser(CamelModel):
    name: str | None
    role: str


class TimelineEntry(CamelModel):
    id: str
    type: str
    title: str
    description: str | None
    user: TimelineUser | None
    metadata: dict[str, Any] | None
    created_at: datetime


class OrderDetailResponse(CamelModel):
    id: str
    order_number: str
    status: OrderStatus
    payment_status: str
    payment_method: str | None
    total_amount: float
    delivery_fee: float
    discount: float
    final_amount: float
    customer: DetailCustomer
    laundry: DetailLaundry
    delivery_address: DeliveryAddress | None
    items: list[DetailLineItem]
    notes: str | None
    pickup_date: datetime | None
    delivery_date: datetime | None
    estimated_delivery: datetime | None
    created_at: datetime
    updated_at: datetime
    timeline: list[TimelineEntry]


# =========================================================================
# Activity feed
# =========================================================================


class ActivityUser(CamelModel):
    id: str
    name: str | None
    email: str
    role: str


class ActivityOrderRef(CamelModel):
    order_number: str
    customer_name: str | None


class ActivityEntry(CamelModel):
    id: str
    type: str
    title: str
    description: str | None
    user: ActivityUser | None
    order: ActivityOrderRef | None
    metadata: dict[str, Any] | None
    created_at: datetime


class ActivityGroup(CamelModel):
    date: str
    activities: list[ActivityEntry]


class LaundryActivityResponse(CamelModel):
    activities: list[ActivityGroup]
    total_count: int
