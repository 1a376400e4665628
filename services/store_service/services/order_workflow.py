"""Order workflow: checkout and the order status state machine.

Checkout turns the buyer's cart into an order in a single transaction:
order, items, payment, first history row, one stock reservation per line
and the cart clear are committed together or not at all.

Status updates drive the ledger. Entering PAYMENT_CONFIRMED (or any later
state) confirms the reservations; entering CANCELLED releases them. The
order's ``stock_status`` records which of the two already happened, so
neither can run twice for the same order.
"""

import uuid
from decimal import Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import ZERO, to_money
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    ConflictError,
    EmptyCartError,
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.store_service.models import (
    Address,
    Coupon,
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusHistory,
    Payment,
    PaymentStatus,
    StockStatus,
)
from services.store_service.schemas import (
    CreateOrderRequest,
    OrderPage,
    OrderSummary,
    PageMeta,
    UpdateOrderStatusRequest,
)
from services.store_service.services.carts import CartSnapshot, CartSnapshotProvider
from services.store_service.services.coupons import CouponEvaluator, compute_discount
from services.store_service.services.inventory_ledger import InventoryLedger
from services.store_service.services.order_numbers import OrderNumberGenerator
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

FORWARD_CHAIN = [
    OrderStatus.PENDING,
    OrderStatus.PAYMENT_CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]
TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Forward moves (skips allowed) and cancellation from any open state."""
    if current in TERMINAL_STATUSES or current == target:
        return False
    if target == OrderStatus.CANCELLED:
        return True
    return FORWARD_CHAIN.index(target) > FORWARD_CHAIN.index(current)


def implies_payment(status: OrderStatus) -> bool:
    """Every state from PAYMENT_CONFIRMED onwards means the order was paid."""
    return status in FORWARD_CHAIN and FORWARD_CHAIN.index(
        status
    ) >= FORWARD_CHAIN.index(OrderStatus.PAYMENT_CONFIRMED)


ORDER_DETAIL_LOADS = (
    selectinload(Order.items),
    selectinload(Order.payment),
    selectinload(Order.shipping_address),
    selectinload(Order.status_history),
)

ORDER_LIST_LOADS = (
    selectinload(Order.items),
    selectinload(Order.payment),
)


def _is_order_number_conflict(exc: IntegrityError) -> bool:
    return "order_number" in str(exc.orig)


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


class OrderWorkflow:
    def __init__(
        self,
        db: AsyncSession,
        *,
        ledger: InventoryLedger,
        carts: CartSnapshotProvider,
        coupons: CouponEvaluator,
        numbers: OrderNumberGenerator,
    ):
        self.db = db
        self.ledger = ledger
        self.carts = carts
        self.coupons = coupons
        self.numbers = numbers

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    async def create_order(self, user_id: str, data: CreateOrderRequest) -> Order:
        """Place an order from the buyer's cart.

        A clash on ``order_number`` (two checkouts drawing the same
        sequence) rolls back and retries the whole unit.
        """
        max_attempts = get_settings().ORDER_NUMBER_MAX_ATTEMPTS

        for attempt in range(1, max_attempts + 1):
            try:
                order_id = await self._place_order(user_id, data)
            except IntegrityError as exc:
                await self.db.rollback()
                if not _is_order_number_conflict(exc):
                    raise
                logger.warning(
                    "Order number conflict for user %s (attempt %d/%d)",
                    user_id,
                    attempt,
                    max_attempts,
                )
                continue
            except Exception:
                await self.db.rollback()
                raise
            return await self.get_order(order_id)

        raise ConflictError("Não foi possível gerar o número do pedido, tente novamente")

    async def _place_order(self, user_id: str, data: CreateOrderRequest) -> uuid.UUID:
        snapshot = await self.carts.get_snapshot(user_id)
        if snapshot.is_empty:
            raise EmptyCartError()

        address = await self.db.scalar(
            select(Address).where(
                Address.id == data.shipping_address_id, Address.user_id == user_id
            )
        )
        if not address:
            raise NotFoundError("Endereço não encontrado")

        await self._check_availability(snapshot)

        order_number = await self.numbers.next_number()
        subtotal = snapshot.subtotal
        shipping_cost = to_money(data.shipping_cost)
        discount, coupon = await self._resolve_discount(data.coupon_code, subtotal)
        total = subtotal + shipping_cost - discount

        order = Order(
            order_number=order_number,
            user_id=user_id,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            discount=discount,
            total=total,
            coupon_id=coupon.id if coupon else None,
            status=OrderStatus.PENDING,
            stock_status=StockStatus.RESERVED,
            shipping_address_id=address.id,
            shipping_method=data.shipping_method,
            notes=data.notes,
        )
        order.items = [
            OrderItem(
                product_id=line.product_id,
                product_name=line.name,
                product_sku=line.sku,
                quantity=line.quantity,
                unit_price=line.price,
                total_price=line.subtotal,
            )
            for line in snapshot.items
        ]
        order.payment = Payment(
            method=data.payment_method,
            status=PaymentStatus.PENDING,
            amount=total,
        )
        order.status_history = [
            OrderStatusHistory(
                status=OrderStatus.PENDING,
                comment="Pedido criado",
                created_by=user_id,
            )
        ]
        self.db.add(order)
        await self.db.flush()

        # Locked re-check; a concurrent checkout may have taken the stock
        for line in snapshot.items:
            try:
                await self.ledger.reserve_stock(
                    line.product_id, line.quantity, str(order.id), commit=False
                )
            except InsufficientStockError as exc:
                raise InsufficientStockError(
                    exc.available,
                    f"Estoque insuficiente para {line.name}. Disponível: {exc.available}",
                ) from exc

        await self.carts.clear(user_id)
        await self.db.commit()

        logger.info(
            "Created order %s for user %s (%d items, total=%s)",
            order_number,
            user_id,
            len(snapshot.items),
            total,
        )
        return order.id

    async def _check_availability(self, snapshot: CartSnapshot) -> None:
        for line in snapshot.items:
            available = await self.ledger.get_available(line.product_id)
            if available is None:
                raise InsufficientStockError(0, f"Produto {line.name} sem estoque")
            if available < line.quantity:
                raise InsufficientStockError(
                    available,
                    f"Estoque insuficiente para {line.name}. Disponível: {available}",
                )

    async def _resolve_discount(
        self, coupon_code: Optional[str], subtotal: Decimal
    ) -> tuple[Decimal, Optional[Coupon]]:
        """Invalid coupons do not block checkout; they just give no discount."""
        if not coupon_code:
            return ZERO, None

        coupon = await self.coupons.validate(coupon_code, subtotal)
        if not coupon:
            logger.info(
                "Ignoring coupon %s for subtotal %s", coupon_code.upper(), subtotal
            )
            return ZERO, None

        return compute_discount(coupon, subtotal), coupon

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    async def update_status(
        self,
        order_id: uuid.UUID,
        data: UpdateOrderStatusRequest,
        actor_id: Optional[str] = None,
    ) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(*ORDER_DETAIL_LOADS)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundError("Pedido não encontrado")

        current, target = order.status, data.status
        if not can_transition(current, target):
            raise ValidationError(
                f"Transição de status inválida: {current.value} → {target.value}"
            )

        try:
            if target == OrderStatus.CANCELLED:
                await self._enter_cancelled(order)
            else:
                await self._enter_forward(order, target, data.tracking_code)

            order.status = target
            order.status_history.append(
                OrderStatusHistory(
                    status=target,
                    comment=data.comment,
                    created_by=actor_id,
                )
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Order %s moved %s→%s by %s",
            order.order_number,
            current.value,
            target.value,
            actor_id,
        )
        return await self.get_order(order.id)

    async def _enter_forward(
        self, order: Order, target: OrderStatus, tracking_code: Optional[str]
    ) -> None:
        now = utc_now()

        if implies_payment(target):
            order.paid_at = order.paid_at or now
            payment = order.payment
            if payment and payment.status == PaymentStatus.PENDING:
                payment.status = PaymentStatus.APPROVED
                payment.paid_at = payment.paid_at or now
            if order.stock_status == StockStatus.RESERVED:
                for item in order.items:
                    if item.product_id:
                        await self.ledger.confirm_reservation(
                            item.product_id, item.quantity, str(order.id), commit=False
                        )
                order.stock_status = StockStatus.CONFIRMED

        if target == OrderStatus.SHIPPED:
            order.shipped_at = order.shipped_at or now
            if tracking_code:
                order.tracking_code = tracking_code
        elif target == OrderStatus.DELIVERED:
            order.delivered_at = order.delivered_at or now

    async def _enter_cancelled(self, order: Order) -> None:
        order.cancelled_at = order.cancelled_at or utc_now()

        # Stock already sold is returned through a manual adjustment
        if order.stock_status == StockStatus.RESERVED:
            for item in order.items:
                if item.product_id:
                    await self.ledger.release_reservation(
                        item.product_id, item.quantity, str(order.id), commit=False
                    )
            order.stock_status = StockStatus.RELEASED

        payment = order.payment
        if payment and payment.status == PaymentStatus.PENDING:
            payment.status = PaymentStatus.CANCELLED

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_order(
        self, order_id: uuid.UUID, user_id: Optional[str] = None
    ) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(*ORDER_DETAIL_LOADS)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundError("Pedido não encontrado")
        if user_id and order.user_id != user_id:
            raise ForbiddenError("Acesso negado a este pedido")
        return order

    async def list_orders(
        self, page: int = 1, limit: int = 20, status: Optional[OrderStatus] = None
    ) -> OrderPage:
        conditions = [Order.status == status] if status else []
        return await self._page(conditions, page, limit)

    async def list_user_orders(
        self, user_id: str, page: int = 1, limit: int = 10
    ) -> OrderPage:
        return await self._page([Order.user_id == user_id], page, limit)

    async def _page(self, conditions: list, page: int, limit: int) -> OrderPage:
        count_query = select(func.count()).select_from(Order)
        query = select(Order)
        for condition in conditions:
            count_query = count_query.where(condition)
            query = query.where(condition)

        total = await self.db.scalar(count_query)
        result = await self.db.execute(
            query.options(*ORDER_LIST_LOADS)
            .execution_options(populate_existing=True)
            .order_by(Order.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return OrderPage(
            data=[OrderSummary.model_validate(o) for o in result.scalars().all()],
            meta=PageMeta.build(total or 0, page, limit),
        )
