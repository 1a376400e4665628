"""Store inventory models: stock tracking and audit trail."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import MovementType, enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# INVENTORY MODELS
# ============================================================================


class Inventory(Base):
    """Stock pool for one product."""

    __tablename__ = "store_inventory"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("store_products.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Stock levels
    quantity: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )  # On hand
    reserved_qty: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )  # Held for orders awaiting payment confirmation

    # Threshold for low-stock reporting
    min_quantity: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="inventory_quantity_non_negative"),
        CheckConstraint(
            "reserved_qty >= 0 AND reserved_qty <= quantity",
            name="inventory_valid_reserved",
        ),
    )

    # Relationships
    product = relationship("Product", back_populates="inventory")
    movements = relationship(
        "StockMovement",
        back_populates="inventory",
        order_by="StockMovement.created_at.desc()",
    )

    @property
    def available(self) -> int:
        """Quantity that can still be sold (on hand minus reserved)."""
        return self.quantity - self.reserved_qty

    def __repr__(self):
        return f"<Inventory product={self.product_id} qty={self.quantity} reserved={self.reserved_qty}>"


class StockMovement(Base):
    """Append-only audit trail for inventory changes.

    ``previous_qty``/``new_qty`` always snapshot the on-hand quantity, so
    reservation movements carry identical values on both.
    """

    __tablename__ = "store_stock_movements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    inventory_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("store_inventory.id", ondelete="RESTRICT"),
        nullable=False,
    )

    type: Mapped[MovementType] = mapped_column(
        SAEnum(
            MovementType,
            values_callable=enum_values,
            name="store_movement_type_enum",
        ),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)  # Magnitude
    previous_qty: Mapped[int] = mapped_column(Integer, nullable=False)
    new_qty: Mapped[int] = mapped_column(Integer, nullable=False)

    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(
        String(100), index=True, nullable=True
    )  # Order id
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="movement_quantity_non_negative"),
        Index("ix_store_stock_movements_inventory_created", "inventory_id", "created_at"),
    )

    # Relationships
    inventory = relationship("Inventory", back_populates="movements")

    def __repr__(self):
        return f"<StockMovement {self.type} qty={self.quantity}>"
