"""Store service business logic."""

from services.store_service.services.carts import (
    CartLine,
    CartSnapshot,
    CartSnapshotProvider,
    SqlCartSnapshotProvider,
)
from services.store_service.services.coupons import CouponEvaluator, SqlCouponEvaluator
from services.store_service.services.dashboard import DashboardAggregator
from services.store_service.services.inventory_ledger import InventoryLedger
from services.store_service.services.order_numbers import OrderNumberGenerator
from services.store_service.services.order_workflow import OrderWorkflow

__all__ = [
    "CartLine",
    "CartSnapshot",
    "CartSnapshotProvider",
    "CouponEvaluator",
    "DashboardAggregator",
    "InventoryLedger",
    "OrderNumberGenerator",
    "OrderWorkflow",
    "SqlCartSnapshotProvider",
    "SqlCouponEvaluator",
]
