"""initial laundry marketplace schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

Users, addresses, laundries, products, orders with line items, reviews
and the activity audit log.
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

_ID = sa.String(36)


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", _ID, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("password", sa.String(255), nullable=True),
        sa.Column(
            "role",
            _enum("user_role", "SUPER_ADMIN", "ADMIN", "CUSTOMER"),
            nullable=False,
        ),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "addresses",
        sa.Column("id", _ID, nullable=False),
        sa.Column("user_id", _ID, nullable=False),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_addresses_created_at", "addresses", ["created_at"])

    op.create_table(
        "laundries",
        sa.Column("id", _ID, nullable=False),
        sa.Column("owner_id", _ID, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column(
            "status",
            _enum(
                "laundry_status",
                "ACTIVE",
                "INACTIVE",
                "SUSPENDED",
                "PENDING_APPROVAL",
            ),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("total_orders", sa.Integer(), nullable=True),
        sa.Column("total_revenue", sa.Float(), nullable=True),
        sa.Column("operating_hours", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_laundries_owner_id", "laundries", ["owner_id"])
    op.create_index("ix_laundries_created_at", "laundries", ["created_at"])
    op.create_index(
        "ix_laundries_status_active", "laundries", ["status", "is_active"]
    )

    op.create_table(
        "products",
        sa.Column("id", _ID, nullable=False),
        sa.Column("laundry_id", _ID, nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["laundry_id"], ["laundries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_laundry_id", "products", ["laundry_id"])
    op.create_index("ix_products_created_at", "products", ["created_at"])

    op.create_table(
        "orders",
        sa.Column("id", _ID, nullable=False),
        sa.Column("order_number", sa.String(50), nullable=False),
        sa.Column("customer_id", _ID, nullable=False),
        sa.Column("laundry_id", _ID, nullable=False),
        sa.Column("address_id", _ID, nullable=True),
        sa.Column(
            "status",
            _enum(
                "order_status",
                "PENDING",
                "CONFIRMED",
                "IN_PROGRESS",
                "READY_FOR_PICKUP",
                "OUT_FOR_DELIVERY",
                "DELIVERED",
                "COMPLETED",
                "CANCELED",
                "REFUNDED",
            ),
            nullable=False,
        ),
        sa.Column("total_amount", sa.Float(), nullable=True),
        sa.Column("delivery_fee", sa.Float(), nullable=True),
        sa.Column("discount", sa.Float(), nullable=True),
        sa.Column("final_amount", sa.Float(), nullable=True),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column(
            "payment_status",
            _enum("payment_status", "PENDING", "PAID", "FAILED", "REFUNDED"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("pickup_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivery_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("estimated_delivery", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["laundry_id"], ["laundries.id"]),
        sa.ForeignKeyConstraint(["address_id"], ["addresses.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_number", name="uq_orders_order_number"),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])
    op.create_index(
        "ix_orders_laundry_created", "orders", ["laundry_id", "created_at"]
    )
    op.create_index("ix_orders_laundry_status", "orders", ["laundry_id", "status"])

    op.create_table(
        "order_items",
        sa.Column("id", _ID, nullable=False),
        sa.Column("order_id", _ID, nullable=True),
        sa.Column("product_id", _ID, nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("total", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["product_id"], ["products.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
    op.create_index("ix_order_items_product_id", "order_items", ["product_id"])

    op.create_table(
        "reviews",
        sa.Column("id", _ID, nullable=False),
        sa.Column("laundry_id", _ID, nullable=False),
        sa.Column("customer_id", _ID, nullable=False),
        sa.Column("order_id", _ID, nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("is_visible", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["laundry_id"], ["laundries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["customer_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reviews_created_at", "reviews", ["created_at"])
    op.create_index(
        "ix_reviews_laundry_visible_created",
        "reviews",
        ["laundry_id", "is_visible", "created_at"],
    )

    op.create_table(
        "activities",
        sa.Column("id", _ID, nullable=False),
        sa.Column(
            "type",
            _enum(
                "activity_type",
                "ORDER_CREATED",
                "ORDER_UPDATED",
                "ORDER_COMPLETED",
                "ORDER_CANCELED",
                "REVIEW_CREATED",
                "LAUNDRY_UPDATED",
                "LAUNDRY_SUSPENDED",
                "USER_LOGIN",
            ),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("laundry_id", _ID, nullable=True),
        sa.Column("user_id", _ID, nullable=True),
        sa.Column("order_id", _ID, nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["laundry_id"], ["laundries.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_activities_laundry_created", "activities", ["laundry_id", "created_at"]
    )
    op.create_index(
        "ix_activities_order_created", "activities", ["order_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_table("reviews")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("products")
    op.drop_table("laundries")
    op.drop_table("addresses")
    op.drop_table("users")
