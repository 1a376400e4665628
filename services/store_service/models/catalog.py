"""Catalog reference model.

Catalog management lives elsewhere; orders and inventory only need the
product's identity, price and status, plus name/SKU for order snapshots.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Boolean, DateTime, Numeric, String, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Product(Base):
    """Products sold in the store (e.g., 'Mesa de Som Digital Behringer X32')."""

    __tablename__ = "store_products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    # Relationships
    inventory = relationship("Inventory", back_populates="product", uselist=False)

    def __repr__(self):
        return f"<Product {self.sku}>"
