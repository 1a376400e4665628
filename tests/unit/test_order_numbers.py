"""Unit tests for order number generation."""

from datetime import datetime, timezone

import pytest
from libs.common.datetime_utils import store_now
from services.store_service.services import OrderNumberGenerator
from tests.factories import OrderFactory, add_address


async def _add_orders(db, *numbers):
    address_id = await add_address(db, "numbering-buyer")
    db.add_all(
        OrderFactory.create(order_number=number, shipping_address_id=address_id)
        for number in numbers
    )
    await db.commit()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_first_order_of_the_year_is_00001(db_session):
    generator = OrderNumberGenerator(db_session)

    number = await generator.next_number()

    assert number == f"BM-{store_now().year}-00001"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sequence_continues_from_last_number(db_session):
    year = store_now().year
    await _add_orders(db_session, f"BM-{year}-00041", f"BM-{year}-00042")
    generator = OrderNumberGenerator(db_session)

    assert await generator.next_number() == f"BM-{year}-00043"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sequence_resets_for_a_new_year(db_session):
    """Last order of 2025 was 00099; the first of 2026 starts over."""
    await _add_orders(db_session, "BM-2025-00099")
    generator = OrderNumberGenerator(db_session)

    new_year = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert await generator.next_number(now=new_year) == "BM-2026-00001"

    old_year = datetime(2025, 12, 31, 12, 0, tzinfo=timezone.utc)
    assert await generator.next_number(now=old_year) == "BM-2025-00100"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_custom_prefix(db_session):
    generator = OrderNumberGenerator(db_session, prefix="BX")
    now = datetime(2026, 6, 1, tzinfo=timezone.utc)

    assert await generator.next_number(now=now) == "BX-2026-00001"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_year_follows_store_timezone(db_session):
    """01:00 UTC on Jan 1st is still Dec 31st in São Paulo."""
    generator = OrderNumberGenerator(db_session)
    now = datetime(2027, 1, 1, 1, 0, tzinfo=timezone.utc)

    assert await generator.next_number(now=now) == "BM-2026-00001"
