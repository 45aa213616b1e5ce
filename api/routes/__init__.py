"""API route modules."""

from routes.auth_routes import router as auth_router
from routes.dashboard_routes import router as dashboard_router
from routes.health_routes import router as health_router
from routes.laundries_routes import router as laundries_router
from routes.orders_routes import router as orders_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "health_router",
    "laundries_router",
    "orders_router",
]
