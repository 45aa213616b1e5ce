"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services free of SQL
and routes focused on HTTP handling. None of them commit; the request
session dependency owns the transaction.
"""

from repositories.activity_repository import ActivityRepository
from repositories.laundry_repository import LaundryRepository
from repositories.order_repository import OrderFilters, OrderRepository
from repositories.review_repository import ReviewFilters, ReviewRepository
from repositories.user_repository import UserRepository

__all__ = [
    "ActivityRepository",
    "LaundryRepository",
    "OrderFilters",
    "OrderRepository",
    "ReviewFilters",
    "ReviewRepository",
    "UserRepository",
]
