"""Cart snapshot provider used by checkout.

Cart editing lives in the storefront; checkout only needs a frozen view
of the lines and a way to empty the cart once the order exists.
"""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Protocol

from libs.common.currency import ZERO, to_money
from services.store_service.models import Cart, CartItem
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload


@dataclass
class CartLine:
    """One cart line, priced at the moment it was added to the cart."""

    product_id: uuid.UUID
    name: str
    sku: str
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.price * self.quantity)


@dataclass
class CartSnapshot:
    items: List[CartLine] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((line.subtotal for line in self.items), ZERO))

    @property
    def is_empty(self) -> bool:
        return not self.items


class CartSnapshotProvider(Protocol):
    """Read access to a buyer's cart, plus clearing after checkout."""

    async def get_snapshot(self, user_id: str) -> CartSnapshot: ...

    async def clear(self, user_id: str) -> None:
        """Remove every line. Must not commit; checkout owns the transaction."""
        ...


class SqlCartSnapshotProvider:
    """Cart provider backed by ``store_carts`` in the caller's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_cart(self, user_id: str):
        result = await self.db.execute(
            select(Cart)
            .where(Cart.user_id == user_id)
            .options(selectinload(Cart.items).selectinload(CartItem.product))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_snapshot(self, user_id: str) -> CartSnapshot:
        cart = await self._get_cart(user_id)
        if not cart:
            return CartSnapshot()

        return CartSnapshot(
            items=[
                CartLine(
                    product_id=item.product_id,
                    name=item.product.name,
                    sku=item.product.sku,
                    quantity=item.quantity,
                    price=to_money(item.price),
                )
                for item in cart.items
            ]
        )

    async def clear(self, user_id: str) -> None:
        cart_ids = select(Cart.id).where(Cart.user_id == user_id)
        await self.db.execute(
            delete(CartItem)
            .where(CartItem.cart_id.in_(cart_ids))
            .execution_options(synchronize_session=False)
        )
