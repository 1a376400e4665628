"""Store Service models package."""

from services.store_service.models.catalog import Product
from services.store_service.models.commerce import (
    Address,
    Cart,
    CartItem,
    Coupon,
    Order,
    OrderItem,
    OrderStatusHistory,
    Payment,
)
from services.store_service.models.enums import (
    AdjustmentType,
    CouponType,
    MovementType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    StockStatus,
)
from services.store_service.models.inventory import Inventory, StockMovement

__all__ = [
    "Address",
    "AdjustmentType",
    "Cart",
    "CartItem",
    "Coupon",
    "CouponType",
    "Inventory",
    "MovementType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStatusHistory",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "StockMovement",
    "StockStatus",
]
