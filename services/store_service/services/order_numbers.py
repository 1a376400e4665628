"""Human-readable order numbers: ``BM-<year>-<5-digit sequence>``."""

from datetime import datetime
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import store_now, to_store_time
from services.store_service.models import Order
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

SEQUENCE_DIGITS = 5


class OrderNumberGenerator:
    """Derives the next number from the last one issued this year.

    Not safe on its own under concurrency; the unique index on
    ``store_orders.order_number`` rejects duplicates and the order
    workflow retries.
    """

    def __init__(self, db: AsyncSession, prefix: Optional[str] = None):
        self.db = db
        self.prefix = prefix or get_settings().ORDER_NUMBER_PREFIX

    def year_prefix(self, now: Optional[datetime] = None) -> str:
        year = (to_store_time(now) if now else store_now()).year
        return f"{self.prefix}-{year}-"

    async def next_number(self, now: Optional[datetime] = None) -> str:
        year_prefix = self.year_prefix(now)
        # Fixed-width sequence, so lexical order is numeric order
        result = await self.db.execute(
            select(Order.order_number)
            .where(Order.order_number.like(f"{year_prefix}%"))
            .order_by(Order.order_number.desc())
            .limit(1)
        )
        last = result.scalar_one_or_none()

        sequence = 1
        if last:
            tail = last[len(year_prefix) :]
            if tail.isdigit():
                sequence = int(tail) + 1

        return f"{year_prefix}{sequence:0{SEQUENCE_DIGITS}d}"
