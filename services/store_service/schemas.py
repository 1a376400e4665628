"""Pydantic schemas for store service."""

import math
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.store_service.models import (
    AdjustmentType,
    MovementType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    StockStatus,
)

# ============================================================================
# PAGINATION
# ============================================================================


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )


# ============================================================================
# PRODUCT / ADDRESS REFERENCES
# ============================================================================


class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    sku: str
    name: str
    price: Decimal
    is_active: bool


class AddressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    recipient: str
    street: str
    number: str
    complement: Optional[str] = None
    district: str
    city: str
    state: str
    zip_code: str


# ============================================================================
# INVENTORY SCHEMAS
# ============================================================================


class AdjustStockRequest(BaseModel):
    """Manual stock change (admin)."""

    type: AdjustmentType = Field(
        ..., description="set = define value, add = stock in, subtract = stock out"
    )
    quantity: int = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=500)


class InventoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    reserved_qty: int
    available: int
    min_quantity: int
    updated_at: datetime
    product: Optional[ProductSummary] = None


class StockMovementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    inventory_id: uuid.UUID
    type: MovementType
    quantity: int
    previous_qty: int
    new_qty: int
    reason: Optional[str] = None
    reference: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime


class InventoryDetail(InventoryResponse):
    """Inventory with its most recent movements."""

    movements: list[StockMovementResponse] = []


class InventoryPage(BaseModel):
    data: list[InventoryResponse]
    meta: PageMeta


class StockMovementPage(BaseModel):
    data: list[StockMovementResponse]
    meta: PageMeta


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class CreateOrderRequest(BaseModel):
    """Checkout from the caller's cart."""

    shipping_address_id: uuid.UUID
    payment_method: PaymentMethod
    shipping_method: Optional[str] = Field(None, max_length=50)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    coupon_code: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)


class UpdateOrderStatusRequest(BaseModel):
    """Status transition (admin)."""

    status: OrderStatus
    comment: Optional[str] = Field(None, max_length=1000)
    tracking_code: Optional[str] = Field(None, max_length=100)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: Optional[uuid.UUID]
    product_name: str
    product_sku: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    method: PaymentMethod
    status: PaymentStatus
    amount: Decimal
    paid_at: Optional[datetime] = None


class OrderStatusHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: OrderStatus
    comment: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime


class OrderSummary(BaseModel):
    """Order as shown in listings."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    user_id: str
    status: OrderStatus
    subtotal: Decimal
    shipping_cost: Decimal
    discount: Decimal
    total: Decimal
    created_at: datetime

    items: list[OrderItemResponse] = []
    payment: Optional[PaymentResponse] = None


class OrderDetail(OrderSummary):
    """Full order view."""

    stock_status: StockStatus
    shipping_address_id: uuid.UUID
    shipping_method: Optional[str] = None
    tracking_code: Optional[str] = None
    notes: Optional[str] = None
    coupon_id: Optional[uuid.UUID] = None

    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    updated_at: datetime

    shipping_address: Optional[AddressResponse] = None
    status_history: list[OrderStatusHistoryResponse] = []


class OrderPage(BaseModel):
    data: list[OrderSummary]
    meta: PageMeta


class RecentOrder(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    user_id: str
    status: OrderStatus
    total: Decimal
    created_at: datetime


class DashboardStats(BaseModel):
    total_orders: int
    pending_orders: int
    today_orders: int
    month_revenue: Decimal
    recent_orders: list[RecentOrder]
