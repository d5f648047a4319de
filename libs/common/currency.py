"""Currency conversion utilities for the BBM storefront.

API / display unit: Rupees (Decimal, 2 dp, e.g. Decimal("1500.00")).
Loyalty unit: BBM Bucks, integer points (100 points = ₹1).

Conversion chain
----------------
Rupees × 100 → Points (floor)
Points ÷ 100 → Rupees
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

POINTS_PER_RUPEE: int = 100
PAISE: Decimal = Decimal("0.01")

Number = Union[int, float, str, Decimal]


# ─── conversion helpers ───────────────────────────────────────────────────────


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without inheriting float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_money(amount: Number) -> Decimal:
    """Round a rupee amount to paise (round half-up)."""
    return to_decimal(amount).quantize(PAISE, rounding=ROUND_HALF_UP)


def floor_int(amount: Number) -> int:
    """Truncate towards negative infinity and return an int."""
    return int(to_decimal(amount).to_integral_value(rounding=ROUND_FLOOR))


def points_to_rupees(points: int) -> Decimal:
    """Convert BBM Bucks to rupees. 100 points = ₹1."""
    return round_money(Decimal(points) / POINTS_PER_RUPEE)


def rupees_to_points(rupees: Number) -> int:
    """Convert rupees to BBM Bucks (floor). ₹1 = 100 points."""
    return floor_int(to_decimal(rupees) * POINTS_PER_RUPEE)


def format_rupees(amount: Number) -> str:
    """Render a rupee amount for user-facing copy: ₹500, ₹499.50."""
    value = round_money(amount)
    if value == value.to_integral_value():
        return f"₹{int(value)}"
    return f"₹{value}"
