"""Factory Boy factories for generating test data.

Factories build unsaved ORM instances; ``create_async`` adds and flushes
them on a session.

Usage:
    owner = await create_async(UserFactory, db_session)
    laundry = await create_async(LaundryFactory, db_session, owner_id=owner.id)
    order = await create_async(
        OrderFactory, db_session, laundry_id=laundry.id, customer_id=owner.id
    )
"""

from datetime import UTC, datetime

import factory
from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import create_access_token, hash_password
from models import (
    Activity,
    ActivityType,
    Address,
    Laundry,
    LaundryStatus,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    Review,
    User,
    UserRole,
    new_id,
)

fake = Faker()

TEST_PASSWORD = "correct-horse-battery"

# bcrypt is slow on purpose; hash once per test session
_TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


def _now() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Async Factory Helpers
# =============================================================================


async def create_async(
    factory_class: type[factory.Factory], db: AsyncSession, **kwargs
):
    """Build an instance with a factory and flush it to the database."""
    instance = factory_class.build(**kwargs)
    db.add(instance)
    await db.flush()
    return instance


async def create_batch_async(
    factory_class: type[factory.Factory], db: AsyncSession, size: int, **kwargs
):
    instances = factory_class.build_batch(size, **kwargs)
    db.add_all(instances)
    await db.flush()
    return instances


def token_for(user: User) -> str:
    """Signed access token carrying the user's current role."""
    return create_access_token(
        user_id=user.id,
        email=user.email,
        role=user.role.value,
        name=user.name,
    )


# =============================================================================
# Users
# =============================================================================


class UserFactory(factory.Factory):
    class Meta:
        model = User

    id = factory.LazyFunction(new_id)
    email = factory.Sequence(lambda n: f"user{n}@{fake.domain_name()}")
    name = factory.LazyAttribute(lambda _: fake.name())
    password = _TEST_PASSWORD_HASH
    role = UserRole.CUSTOMER
    phone = factory.LazyAttribute(lambda _: fake.phone_number()[:50])
    is_active = True
    created_at = factory.LazyFunction(_now)
    updated_at = factory.LazyFunction(_now)


class SuperAdminFactory(UserFactory):
    role = UserRole.SUPER_ADMIN


class AddressFactory(factory.Factory):
    class Meta:
        model = Address

    id = factory.LazyFunction(new_id)
    street = factory.LazyAttribute(lambda _: fake.street_address())
    city = factory.LazyAttribute(lambda _: fake.city())
    state = factory.LazyAttribute(lambda _: fake.state())
    zip_code = factory.LazyAttribute(lambda _: fake.postcode())
    country = "US"
    is_default = True
    created_at = factory.LazyFunction(_now)
    updated_at = factory.LazyFunction(_now)


# =============================================================================
# Laundries and catalog
# =============================================================================


class LaundryFactory(factory.Factory):
    class Meta:
        model = Laundry

    id = factory.LazyFunction(new_id)
    name = factory.LazyAttribute(lambda _: f"{fake.last_name()} Laundry")
    description = factory.LazyAttribute(lambda _: fake.sentence())
    email = factory.LazyAttribute(lambda _: fake.company_email())
    phone = factory.LazyAttribute(lambda _: fake.phone_number()[:50])
    address = factory.LazyAttribute(lambda _: fake.street_address())
    city = factory.LazyAttribute(lambda _: fake.city())
    state = factory.LazyAttribute(lambda _: fake.state())
    zip_code = factory.LazyAttribute(lambda _: fake.postcode())
    country = "US"
    status = LaundryStatus.ACTIVE
    is_active = True
    rating = 0.0
    total_orders = 0
    total_revenue = 0.0
    created_at = factory.LazyFunction(_now)
    updated_at = factory.LazyFunction(_now)


class ProductFactory(factory.Factory):
    class Meta:
        model = Product

    id = factory.LazyFunction(new_id)
    name = factory.LazyAttribute(lambda _: fake.word().title())
    description = factory.LazyAttribute(lambda _: fake.sentence())
    category = "Wash & Fold"
    price = 10.0
    is_active = True
    created_at = factory.LazyFunction(_now)
    updated_at = factory.LazyFunction(_now)


# =============================================================================
# Orders
# =============================================================================


class OrderFactory(factory.Factory):
    class Meta:
        model = Order

    id = factory.LazyFunction(new_id)
    order_number = factory.Sequence(lambda n: f"ORD-{n:06d}")
    status = OrderStatus.PENDING
    total_amount = 20.0
    delivery_fee = 5.0
    discount = 0.0
    final_amount = 25.0
    payment_method = "card"
    payment_status = PaymentStatus.PENDING
    created_at = factory.LazyFunction(_now)
    updated_at = factory.LazyFunction(_now)


class OrderItemFactory(factory.Factory):
    class Meta:
        model = OrderItem

    id = factory.LazyFunction(new_id)
    quantity = 1
    price = 10.0
    total = factory.LazyAttribute(lambda o: o.price * o.quantity)


# =============================================================================
# Reviews and activity
# =============================================================================


class ReviewFactory(factory.Factory):
    class Meta:
        model = Review

    id = factory.LazyFunction(new_id)
    rating = 5
    comment = factory.LazyAttribute(lambda _: fake.sentence())
    is_visible = True
    created_at = factory.LazyFunction(_now)
    updated_at = factory.LazyFunction(_now)


class ActivityFactory(factory.Factory):
    class Meta:
        model = Activity

    id = factory.LazyFunction(new_id)
    type = ActivityType.ORDER_CREATED
    title = "Order Created"
    description = factory.LazyAttribute(lambda _: fake.sentence())
    created_at = factory.LazyFunction(_now)
