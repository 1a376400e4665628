"""Inventory ledger: on-hand stock, reservations and the movement audit trail.

Every mutation follows the same pattern:

1. SELECT ... FOR UPDATE on the inventory row
2. Validate the change against the locked values
3. Snapshot previous/new on-hand quantity into a StockMovement
4. Update the row
5. Commit, unless the caller owns the transaction (``commit=False``)
"""

import uuid
from typing import Optional

from libs.common.errors import InsufficientStockError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from services.store_service.models import (
    AdjustmentType,
    Inventory,
    MovementType,
    Product,
    StockMovement,
)
from services.store_service.schemas import (
    AdjustStockRequest,
    InventoryDetail,
    InventoryPage,
    InventoryResponse,
    PageMeta,
    StockMovementPage,
    StockMovementResponse,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

RECENT_MOVEMENTS_LIMIT = 20

# Movement reasons written by the order workflow
RESERVE_REASON = "Reserva para pedido"
CONFIRM_REASON = "Venda confirmada"
RELEASE_REASON = "Reserva liberada"


class InventoryLedger:
    """Stock operations for a single unit of work (one ``AsyncSession``)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _lock(self, product_id: uuid.UUID) -> Optional[Inventory]:
        result = await self.db.execute(
            select(Inventory)
            .where(Inventory.product_id == product_id)
            .options(selectinload(Inventory.product))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _lock_or_404(self, product_id: uuid.UUID) -> Inventory:
        inventory = await self._lock(product_id)
        if not inventory:
            raise NotFoundError("Estoque não encontrado")
        return inventory

    def _record(
        self,
        inventory: Inventory,
        *,
        movement_type: MovementType,
        quantity: int,
        previous_qty: int,
        new_qty: int,
        reason: Optional[str],
        reference: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> StockMovement:
        movement = StockMovement(
            inventory_id=inventory.id,
            type=movement_type,
            quantity=quantity,
            previous_qty=previous_qty,
            new_qty=new_qty,
            reason=reason,
            reference=reference,
            created_by=created_by,
        )
        self.db.add(movement)
        return movement

    async def _finish(self, commit: bool) -> None:
        await self.db.flush()
        if commit:
            await self.db.commit()

    @staticmethod
    def _require_positive(quantity: int) -> None:
        if quantity < 1:
            raise ValidationError("Quantidade deve ser maior que zero")

    # ------------------------------------------------------------------
    # Manual adjustment
    # ------------------------------------------------------------------

    async def adjust_stock(
        self,
        product_id: uuid.UUID,
        data: AdjustStockRequest,
        actor_id: Optional[str] = None,
        *,
        commit: bool = True,
    ) -> Inventory:
        """Set, add to or subtract from on-hand stock."""
        inventory = await self._lock_or_404(product_id)
        previous = inventory.quantity

        if data.type == AdjustmentType.SET:
            new_qty = data.quantity
            movement_type = MovementType.ADJUSTMENT
        elif data.type == AdjustmentType.ADD:
            new_qty = previous + data.quantity
            movement_type = MovementType.IN
        elif data.type == AdjustmentType.SUBTRACT:
            new_qty = previous - data.quantity
            movement_type = MovementType.OUT
        else:
            raise ValidationError("Tipo de ajuste inválido")

        if new_qty < 0:
            raise ValidationError("Estoque não pode ser negativo")
        if new_qty < inventory.reserved_qty:
            raise ValidationError(
                f"Estoque não pode ficar abaixo da quantidade reservada "
                f"({inventory.reserved_qty})"
            )

        self._record(
            inventory,
            movement_type=movement_type,
            quantity=abs(new_qty - previous),
            previous_qty=previous,
            new_qty=new_qty,
            reason=data.reason,
            created_by=actor_id,
        )
        inventory.quantity = new_qty
        await self._finish(commit)

        logger.info(
            "Adjusted stock for product %s (%s %d) qty %d→%d by %s",
            product_id,
            data.type.value,
            data.quantity,
            previous,
            new_qty,
            actor_id,
        )
        return inventory

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    async def reserve_stock(
        self,
        product_id: uuid.UUID,
        quantity: int,
        reference: Optional[str] = None,
        *,
        commit: bool = True,
    ) -> Inventory:
        """Hold ``quantity`` units for an order awaiting payment."""
        self._require_positive(quantity)
        inventory = await self._lock_or_404(product_id)

        if inventory.available < quantity:
            raise InsufficientStockError(inventory.available)

        self._record(
            inventory,
            movement_type=MovementType.RESERVED,
            quantity=quantity,
            previous_qty=inventory.quantity,
            new_qty=inventory.quantity,
            reason=RESERVE_REASON,
            reference=reference,
        )
        inventory.reserved_qty += quantity
        await self._finish(commit)

        logger.info(
            "Reserved %d of product %s (ref=%s), reserved now %d",
            quantity,
            product_id,
            reference,
            inventory.reserved_qty,
        )
        return inventory

    async def confirm_reservation(
        self,
        product_id: uuid.UUID,
        quantity: int,
        reference: Optional[str] = None,
        *,
        commit: bool = True,
    ) -> Inventory:
        """Turn a reservation into a sale: stock leaves on-hand."""
        self._require_positive(quantity)
        inventory = await self._lock_or_404(product_id)

        if inventory.reserved_qty < quantity or inventory.quantity < quantity:
            raise ValidationError(
                f"Reserva insuficiente para confirmar. Reservado: {inventory.reserved_qty}"
            )

        previous = inventory.quantity
        self._record(
            inventory,
            movement_type=MovementType.OUT,
            quantity=quantity,
            previous_qty=previous,
            new_qty=previous - quantity,
            reason=CONFIRM_REASON,
            reference=reference,
        )
        inventory.quantity = previous - quantity
        inventory.reserved_qty -= quantity
        await self._finish(commit)

        logger.info(
            "Confirmed %d of product %s (ref=%s), qty %d→%d",
            quantity,
            product_id,
            reference,
            previous,
            inventory.quantity,
        )
        return inventory

    async def release_reservation(
        self,
        product_id: uuid.UUID,
        quantity: int,
        reference: Optional[str] = None,
        *,
        commit: bool = True,
    ) -> Inventory:
        """Give reserved units back to the sellable pool."""
        self._require_positive(quantity)
        inventory = await self._lock_or_404(product_id)

        if inventory.reserved_qty < quantity:
            raise ValidationError(
                f"Reserva insuficiente para liberar. Reservado: {inventory.reserved_qty}"
            )

        self._record(
            inventory,
            movement_type=MovementType.RELEASED,
            quantity=quantity,
            previous_qty=inventory.quantity,
            new_qty=inventory.quantity,
            reason=RELEASE_REASON,
            reference=reference,
        )
        inventory.reserved_qty -= quantity
        await self._finish(commit)

        logger.info(
            "Released %d of product %s (ref=%s), reserved now %d",
            quantity,
            product_id,
            reference,
            inventory.reserved_qty,
        )
        return inventory

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_available(self, product_id: uuid.UUID) -> Optional[int]:
        """Unlocked read of sellable quantity; None when the product has no row."""
        result = await self.db.execute(
            select(Inventory.quantity - Inventory.reserved_qty).where(
                Inventory.product_id == product_id
            )
        )
        return result.scalar_one_or_none()

    async def get_low_stock(self, page: int = 1, limit: int = 20) -> InventoryPage:
        condition = Inventory.quantity <= Inventory.min_quantity
        total = await self.db.scalar(
            select(func.count()).select_from(Inventory).where(condition)
        )
        result = await self.db.execute(
            select(Inventory)
            .where(condition)
            .options(selectinload(Inventory.product))
            .execution_options(populate_existing=True)
            .order_by(Inventory.quantity.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return InventoryPage(
            data=[InventoryResponse.model_validate(i) for i in result.scalars().all()],
            meta=PageMeta.build(total or 0, page, limit),
        )

    async def get_all_inventory(self, page: int = 1, limit: int = 50) -> InventoryPage:
        total = await self.db.scalar(select(func.count()).select_from(Inventory))
        result = await self.db.execute(
            select(Inventory)
            .join(Product, Inventory.product_id == Product.id)
            .options(selectinload(Inventory.product))
            .execution_options(populate_existing=True)
            .order_by(Product.name.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return InventoryPage(
            data=[InventoryResponse.model_validate(i) for i in result.scalars().all()],
            meta=PageMeta.build(total or 0, page, limit),
        )

    async def get_movement_history(
        self, inventory_id: uuid.UUID, page: int = 1, limit: int = 50
    ) -> StockMovementPage:
        condition = StockMovement.inventory_id == inventory_id
        total = await self.db.scalar(
            select(func.count()).select_from(StockMovement).where(condition)
        )
        result = await self.db.execute(
            select(StockMovement)
            .where(condition)
            .order_by(StockMovement.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return StockMovementPage(
            data=[
                StockMovementResponse.model_validate(m)
                for m in result.scalars().all()
            ],
            meta=PageMeta.build(total or 0, page, limit),
        )

    async def get_product_inventory(self, product_id: uuid.UUID) -> InventoryDetail:
        result = await self.db.execute(
            select(Inventory)
            .where(Inventory.product_id == product_id)
            .options(selectinload(Inventory.product))
            .execution_options(populate_existing=True)
        )
        inventory = result.scalar_one_or_none()
        if not inventory:
            raise NotFoundError("Estoque não encontrado")

        movements = await self.db.execute(
            select(StockMovement)
            .where(StockMovement.inventory_id == inventory.id)
            .order_by(StockMovement.created_at.desc())
            .limit(RECENT_MOVEMENTS_LIMIT)
        )
        return InventoryDetail(
            **InventoryResponse.model_validate(inventory).model_dump(),
            movements=[
                StockMovementResponse.model_validate(m)
                for m in movements.scalars().all()
            ],
        )
