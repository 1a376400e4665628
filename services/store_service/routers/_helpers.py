"""Shared dependencies for store routers.

Each request gets its own ledger/workflow built on the request's session,
so everything one endpoint does lands in the same transaction.
"""

from fastapi import Depends
from libs.db.session import get_async_db
from services.store_service.services import (
    DashboardAggregator,
    InventoryLedger,
    OrderNumberGenerator,
    OrderWorkflow,
    SqlCartSnapshotProvider,
    SqlCouponEvaluator,
)
from sqlalchemy.ext.asyncio import AsyncSession


def get_inventory_ledger(db: AsyncSession = Depends(get_async_db)) -> InventoryLedger:
    return InventoryLedger(db)


def get_order_workflow(db: AsyncSession = Depends(get_async_db)) -> OrderWorkflow:
    return OrderWorkflow(
        db,
        ledger=InventoryLedger(db),
        carts=SqlCartSnapshotProvider(db),
        coupons=SqlCouponEvaluator(db),
        numbers=OrderNumberGenerator(db),
    )


def get_dashboard(db: AsyncSession = Depends(get_async_db)) -> DashboardAggregator:
    return DashboardAggregator(db)
