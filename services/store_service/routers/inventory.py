"""Admin inventory router: stock levels, adjustments and movement history."""

import uuid

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from services.store_service.routers._helpers import get_inventory_ledger
from services.store_service.schemas import (
    AdjustStockRequest,
    InventoryDetail,
    InventoryPage,
    InventoryResponse,
    StockMovementPage,
)
from services.store_service.services import InventoryLedger

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=InventoryPage)
async def list_inventory(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(require_admin),
    ledger: InventoryLedger = Depends(get_inventory_ledger),
):
    """List stock for every product, by product name."""
    return await ledger.get_all_inventory(page, limit)


@router.get("/low-stock", response_model=InventoryPage)
async def list_low_stock(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: AuthUser = Depends(require_admin),
    ledger: InventoryLedger = Depends(get_inventory_ledger),
):
    """Products at or below their minimum quantity."""
    return await ledger.get_low_stock(page, limit)


@router.get("/product/{product_id}", response_model=InventoryDetail)
async def get_product_inventory(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    ledger: InventoryLedger = Depends(get_inventory_ledger),
):
    return await ledger.get_product_inventory(product_id)


@router.post("/product/{product_id}/adjust", response_model=InventoryResponse)
async def adjust_stock(
    product_id: uuid.UUID,
    payload: AdjustStockRequest,
    current_user: AuthUser = Depends(require_admin),
    ledger: InventoryLedger = Depends(get_inventory_ledger),
):
    """Set, add or subtract on-hand stock. Writes one movement."""
    inventory = await ledger.adjust_stock(product_id, payload, current_user.user_id)
    return InventoryResponse.model_validate(inventory)


@router.get("/{inventory_id}/movements", response_model=StockMovementPage)
async def list_movements(
    inventory_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(require_admin),
    ledger: InventoryLedger = Depends(get_inventory_ledger),
):
    return await ledger.get_movement_history(inventory_id, page, limit)
