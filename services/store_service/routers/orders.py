"""Store orders router: checkout, order history and admin order management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.rate_limit import checkout_limit
from services.store_service.models import OrderStatus
from services.store_service.routers._helpers import get_dashboard, get_order_workflow
from services.store_service.schemas import (
    CreateOrderRequest,
    DashboardStats,
    OrderDetail,
    OrderPage,
    UpdateOrderStatusRequest,
)
from services.store_service.services import DashboardAggregator, OrderWorkflow

router = APIRouter(prefix="/orders", tags=["orders"])


# ============================================================================
# CHECKOUT & BUYER HISTORY
# ============================================================================


@router.post("", response_model=OrderDetail, status_code=status.HTTP_201_CREATED)
@checkout_limit
async def create_order(
    request: Request,
    payload: CreateOrderRequest,
    current_user: AuthUser = Depends(get_current_user),
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    """Place an order from the caller's cart."""
    order = await workflow.create_order(current_user.user_id, payload)
    return OrderDetail.model_validate(order)


@router.get("/my-orders", response_model=OrderPage)
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    """List the caller's orders, newest first."""
    return await workflow.list_user_orders(current_user.user_id, page, limit)


@router.get("/my-orders/{order_id}", response_model=OrderDetail)
async def get_my_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    """Get one of the caller's orders."""
    order = await workflow.get_order(order_id, user_id=current_user.user_id)
    return OrderDetail.model_validate(order)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("", response_model=OrderPage)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    """List all orders, optionally filtered by status."""
    return await workflow.list_orders(page, limit, status_filter)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: AuthUser = Depends(require_admin),
    dashboard: DashboardAggregator = Depends(get_dashboard),
):
    """Order counts, 30-day revenue and the latest orders."""
    return await dashboard.get_stats()


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    order = await workflow.get_order(order_id)
    return OrderDetail.model_validate(order)


@router.patch("/{order_id}/status", response_model=OrderDetail)
async def update_order_status(
    order_id: uuid.UUID,
    payload: UpdateOrderStatusRequest,
    current_user: AuthUser = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    """Move an order through its lifecycle (stock follows the status)."""
    order = await workflow.update_status(order_id, payload, current_user.user_id)
    return OrderDetail.model_validate(order)
