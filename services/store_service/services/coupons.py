"""Coupon validation for checkout."""

from decimal import Decimal
from typing import Optional, Protocol

from libs.common.currency import percent_of, to_money
from libs.common.datetime_utils import ensure_utc, utc_now
from libs.common.logging import get_logger
from services.store_service.models import Coupon, CouponType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class CouponEvaluator(Protocol):
    """Decides whether a coupon code applies to an order value."""

    async def validate(self, code: str, order_value: Decimal) -> Optional[Coupon]:
        """Return the coupon when usable, None otherwise."""
        ...


class SqlCouponEvaluator:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def validate(self, code: str, order_value: Decimal) -> Optional[Coupon]:
        normalized = code.strip().upper()
        result = await self.db.execute(select(Coupon).where(Coupon.code == normalized))
        coupon = result.scalar_one_or_none()

        reason = rejection_reason(coupon, order_value)
        if reason:
            logger.info("Coupon %s not applied: %s", normalized, reason)
            return None
        return coupon


def rejection_reason(coupon: Optional[Coupon], order_value: Decimal) -> Optional[str]:
    """Why ``coupon`` cannot be used for ``order_value``; None when it can."""
    if coupon is None:
        return "unknown code"
    if not coupon.is_active:
        return "inactive"

    now = utc_now()
    if coupon.expires_at and ensure_utc(coupon.expires_at) < now:
        return "expired"
    if coupon.starts_at and ensure_utc(coupon.starts_at) > now:
        return "not started"
    if coupon.usage_limit and coupon.usage_count >= coupon.usage_limit:
        return "usage limit reached"
    if coupon.min_order_value and order_value < coupon.min_order_value:
        return "below minimum order value"
    return None


def compute_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    """PERCENTAGE: share of the subtotal, capped by max_discount. FIXED: face value."""
    if coupon.type == CouponType.PERCENTAGE:
        discount = percent_of(subtotal, coupon.value)
        if coupon.max_discount:
            discount = min(discount, to_money(coupon.max_discount))
        return discount
    return to_money(coupon.value)
