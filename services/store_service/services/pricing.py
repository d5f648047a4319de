"""Checkout bill arithmetic: pure functions, no I/O."""

from decimal import Decimal
from typing import Iterable, Optional

from libs.common.currency import Number, points_to_rupees, round_money, to_decimal
from services.coupon_service.schemas import CartItemIn, CouponApplication
from services.coupon_service.services.rules import STANDARD_SHIPPING_COST
from services.store_service.models.enums import AwardBase
from services.store_service.schemas import CheckoutTotals

SHIPPING_FEE = STANDARD_SHIPPING_COST
TAX_RATE = Decimal("0.18")  # flat GST


def compute_subtotal(items: Iterable[CartItemIn]) -> Decimal:
    return round_money(sum((item.line_total for item in items), Decimal("0")))


def compute_totals(
    subtotal: Number,
    coupon: Optional[CouponApplication] = None,
    loyalty_points: int = 0,
) -> CheckoutTotals:
    """Build the bill.

    Shipping is waived by a free-shipping coupon, which never adds to the
    coupon discount. Tax applies to the subtotal after the coupon and BBM
    Bucks discounts.
    """
    subtotal = round_money(subtotal)
    applied = coupon is not None and coupon.is_valid
    free_shipping = applied and coupon.free_shipping
    coupon_discount = (
        round_money(coupon.discount_amount)
        if applied and not free_shipping
        else Decimal("0.00")
    )
    loyalty_discount = points_to_rupees(loyalty_points)

    shipping = Decimal("0.00") if free_shipping else round_money(SHIPPING_FEE)
    shipping_savings = round_money(SHIPPING_FEE) if free_shipping else Decimal("0.00")

    taxable = subtotal - coupon_discount - loyalty_discount
    tax = round_money(taxable * TAX_RATE)
    total = round_money(taxable + tax + shipping)

    return CheckoutTotals(
        subtotal=subtotal,
        coupon_discount=coupon_discount,
        loyalty_points_redeemed=loyalty_points,
        loyalty_discount=loyalty_discount,
        shipping=shipping,
        shipping_savings=shipping_savings,
        tax=tax,
        total=total,
    )


def award_amount_for(totals: CheckoutTotals, award_base: AwardBase) -> Decimal:
    """The single figure BBM Bucks are awarded on for this order."""
    if award_base == AwardBase.SUBTOTAL:
        return to_decimal(totals.subtotal)
    return to_decimal(totals.total)
