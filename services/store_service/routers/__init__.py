"""Store service routers package."""

from services.store_service.routers.inventory import router as inventory_router
from services.store_service.routers.orders import router as orders_router

__all__ = [
    "inventory_router",
    "orders_router",
]
