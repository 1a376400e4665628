"""Currency helpers for the store.

Storage and API unit: Real (BRL) as ``Decimal`` with two places (centavos).
Arithmetic on prices, discounts and totals stays in ``Decimal``; floats are
only ever produced at the JSON boundary.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

CENTAVO = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


# ─── conversion helpers ───────────────────────────────────────────────────────


def to_money(value: Number) -> Decimal:
    """Coerce to Decimal and round half-up to centavos."""
    if not isinstance(value, Decimal):
        # str() keeps float inputs like 25.9 from turning into 25.8999...
        value = Decimal(str(value))
    return value.quantize(CENTAVO, rounding=ROUND_HALF_UP)


def percent_of(amount: Number, percent: Number) -> Decimal:
    """``amount * percent / 100`` rounded to centavos."""
    return to_money(to_money(amount) * Decimal(str(percent)) / Decimal(100))
