"""Read-only order rollups for the admin dashboard."""

from datetime import datetime, timedelta
from typing import Optional

from libs.common.currency import ZERO, to_money
from libs.common.datetime_utils import start_of_store_day, utc_now
from services.store_service.models import Order, OrderStatus
from services.store_service.schemas import DashboardStats, RecentOrder
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

REVENUE_WINDOW_DAYS = 30
RECENT_ORDERS_LIMIT = 5

# Statuses whose totals count as revenue
PAID_STATUSES = (
    OrderStatus.PAYMENT_CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)


class DashboardAggregator:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        now = now or utc_now()

        total_orders = await self.db.scalar(select(func.count()).select_from(Order))
        pending_orders = await self.db.scalar(
            select(func.count())
            .select_from(Order)
            .where(Order.status == OrderStatus.PENDING)
        )
        today_orders = await self.db.scalar(
            select(func.count())
            .select_from(Order)
            .where(Order.created_at >= start_of_store_day(now))
        )
        month_revenue = await self.db.scalar(
            select(func.sum(Order.total)).where(
                Order.created_at >= now - timedelta(days=REVENUE_WINDOW_DAYS),
                Order.status.in_(PAID_STATUSES),
            )
        )
        recent = await self.db.execute(
            select(Order).order_by(Order.created_at.desc()).limit(RECENT_ORDERS_LIMIT)
        )

        return DashboardStats(
            total_orders=total_orders or 0,
            pending_orders=pending_orders or 0,
            today_orders=today_orders or 0,
            month_revenue=to_money(month_revenue) if month_revenue is not None else ZERO,
            recent_orders=[RecentOrder.model_validate(o) for o in recent.scalars().all()],
        )
