"""Integration tests for the /orders endpoints."""

import uuid
from decimal import Decimal

import pytest
from libs.auth.models import Role
from tests.factories import add_address, fill_cart, stock_product


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _seed_checkout(db, user_id, stock_b=5):
    """Cart with 2×A @100 and 1×B @50 plus an address; returns the POST body."""
    a_id, _ = await stock_product(
        db, quantity=10, name="Caixa A", price=Decimal("100.00")
    )
    b_id, _ = await stock_product(
        db, quantity=stock_b, name="Caixa B", price=Decimal("50.00")
    )
    await fill_cart(
        db,
        user_id,
        [(a_id, 2, Decimal("100.00")), (b_id, 1, Decimal("50.00"))],
    )
    address_id = await add_address(db, user_id)
    return {
        "shipping_address_id": str(address_id),
        "payment_method": "PIX",
        "shipping_cost": "20.00",
    }


async def _place_order(client, db, login):
    buyer = login(Role.CUSTOMER)
    body = await _seed_checkout(db, buyer.user_id)
    response = await client.post("/orders", json=body)
    assert response.status_code == 201, response.text
    return buyer, response.json()


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order(client, db_session, login):
    """POST /orders — cart becomes a PENDING order with reserved stock."""
    _, data = await _place_order(client, db_session, login)

    assert data["order_number"].startswith("BM-")
    assert data["status"] == "PENDING"
    assert data["stock_status"] == "RESERVED"
    assert Decimal(data["subtotal"]) == Decimal("250.00")
    assert Decimal(data["total"]) == Decimal("270.00")
    assert len(data["items"]) == 2
    assert data["payment"]["status"] == "PENDING"
    assert data["shipping_address"]["city"] == "São Paulo"
    assert data["status_history"][0]["comment"] == "Pedido criado"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_with_empty_cart(client, db_session, login):
    buyer = login()
    address_id = await add_address(db_session, buyer.user_id)

    response = await client.post(
        "/orders",
        json={"shipping_address_id": str(address_id), "payment_method": "PIX"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Carrinho está vazio"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_out_of_stock(client, db_session, login):
    buyer = login()
    body = await _seed_checkout(db_session, buyer.user_id, stock_b=0)

    response = await client.post("/orders", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Estoque insuficiente para Caixa B. Disponível: 0"
    assert response.headers["X-Available-Quantity"] == "0"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_rejects_invalid_payload(client, db_session, login):
    buyer = login()
    body = await _seed_checkout(db_session, buyer.user_id)

    response = await client.post(
        "/orders", json={**body, "shipping_cost": "-1.00", "payment_method": "CASH"}
    )

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Buyer history
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_orders_lists_only_own_orders(client, db_session, login):
    buyer, created = await _place_order(client, db_session, login)
    await _place_order(client, db_session, login)
    login(Role.CUSTOMER, user_id=buyer.user_id)

    response = await client.get("/orders/my-orders")

    assert response.status_code == 200
    data = response.json()
    assert data["meta"] == {"total": 1, "page": 1, "limit": 10, "total_pages": 1}
    assert data["data"][0]["id"] == created["id"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_order_detail_is_owner_only(client, db_session, login):
    buyer, created = await _place_order(client, db_session, login)

    own = await client.get(f"/orders/my-orders/{created['id']}")
    assert own.status_code == 200
    assert own.json()["order_number"] == created["order_number"]

    login(Role.CUSTOMER)
    foreign = await client.get(f"/orders/my-orders/{created['id']}")
    assert foreign.status_code == 403
    assert foreign.json()["detail"] == "Acesso negado a este pedido"


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_routes_reject_customers(client, login):
    login(Role.CUSTOMER)

    for path in ("/orders", "/orders/dashboard", f"/orders/{uuid.uuid4()}"):
        response = await client.get(path)
        assert response.status_code == 403, path
        assert response.json()["detail"] == "Acesso restrito a administradores"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_orders_by_status(client, db_session, login):
    _, first = await _place_order(client, db_session, login)
    await _place_order(client, db_session, login)

    login(Role.ADMIN)
    await client.patch(f"/orders/{first['id']}/status", json={"status": "CANCELLED"})

    response = await client.get("/orders", params={"status": "CANCELLED"})
    assert response.status_code == 200
    data = response.json()
    assert data["meta"]["total"] == 1
    assert data["data"][0]["id"] == first["id"]

    response = await client.get("/orders", params={"page": 1, "limit": 1})
    assert response.json()["meta"]["total_pages"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_confirms_payment(client, db_session, login):
    """PATCH /orders/{id}/status — PENDING → PAYMENT_CONFIRMED."""
    _, created = await _place_order(client, db_session, login)
    login(Role.SUPER_ADMIN)

    response = await client.patch(
        f"/orders/{created['id']}/status",
        json={"status": "PAYMENT_CONFIRMED", "comment": "Pagamento PIX recebido"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "PAYMENT_CONFIRMED"
    assert data["stock_status"] == "CONFIRMED"
    assert data["paid_at"] is not None
    assert data["payment"]["status"] == "APPROVED"
    assert len(data["status_history"]) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_transition_is_400(client, db_session, login):
    _, created = await _place_order(client, db_session, login)
    login(Role.ADMIN)
    await client.patch(
        f"/orders/{created['id']}/status", json={"status": "DELIVERED"}
    )

    response = await client.patch(
        f"/orders/{created['id']}/status", json={"status": "CANCELLED"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Transição de status inválida: DELIVERED → CANCELLED"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_get_unknown_order_is_404(client, login):
    login(Role.ADMIN)

    response = await client.get(f"/orders/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Pedido não encontrado"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard(client, db_session, login):
    await _place_order(client, db_session, login)
    login(Role.ADMIN)

    response = await client.get("/orders/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["total_orders"] == 1
    assert data["pending_orders"] == 1
    assert data["today_orders"] == 1
    assert Decimal(data["month_revenue"]) == Decimal("0")
    assert len(data["recent_orders"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pagination_bounds_are_validated(client, login):
    login(Role.ADMIN)

    assert (await client.get("/orders", params={"limit": 101})).status_code == 422
    assert (await client.get("/orders", params={"page": 0})).status_code == 422
