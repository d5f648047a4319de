"""Coupon rules: pure helpers for category scoping and discount arithmetic.

Category matching is case-insensitive and bidirectional: an item category
matches a rule category when either contains the other ("PAINTS" matches
"paint" and "paint" matches "PAINTS"). A blank category never matches.
"""

from decimal import Decimal
from typing import Iterable, Optional

from libs.common.currency import Number, round_money, to_decimal
from services.coupon_service.models.enums import DiscountType
from services.coupon_service.schemas.order import CartItemIn

STANDARD_SHIPPING_COST = Decimal("50.00")


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def category_matches(item_category: Optional[str], rule_category: Optional[str]) -> bool:
    item = (item_category or "").strip().lower()
    rule = (rule_category or "").strip().lower()
    if not item or not rule:
        return False
    return item == rule or rule in item or item in rule


def item_is_applicable(
    item_category: Optional[str], applicable_categories: Optional[Iterable[str]]
) -> bool:
    return any(
        category_matches(item_category, rule) for rule in applicable_categories or []
    )


def item_is_excluded(
    item_category: Optional[str], excluded_categories: Optional[Iterable[str]]
) -> bool:
    return any(
        category_matches(item_category, rule) for rule in excluded_categories or []
    )


def active_user_ids(specific_users: Optional[Iterable[Optional[str]]]) -> list[str]:
    """Allow-list entries with blanks dropped. Empty result means everyone."""
    return [u.strip() for u in specific_users or [] if u and u.strip()]


def discount_base(
    items: list[CartItemIn],
    subtotal: Number,
    applicable_categories: Optional[list[str]],
    excluded_categories: Optional[list[str]],
) -> Decimal:
    """Amount a coupon discounts against.

    With applicable categories set, only lines that are applicable and not
    excluded count. Otherwise the full subtotal.
    """
    if not applicable_categories:
        return to_decimal(subtotal)
    return sum(
        (
            item.line_total
            for item in items
            if item_is_applicable(item.category, applicable_categories)
            and not item_is_excluded(item.category, excluded_categories)
        ),
        Decimal("0"),
    )


def compute_discount(
    discount_type: DiscountType,
    discount_value: Number,
    base: Number,
    max_discount: Optional[Number] = None,
) -> Decimal:
    """Rupee discount for a coupon against ``base``, capped at the base.

    Free shipping is a shipping waiver, not a discount, so it returns zero.
    """
    base = to_decimal(base)
    value = to_decimal(discount_value)

    if discount_type == DiscountType.PERCENTAGE:
        amount = base * value / 100
        if max_discount:
            amount = min(amount, to_decimal(max_discount))
    elif discount_type == DiscountType.FIXED:
        amount = value
    else:
        amount = Decimal("0")

    return round_money(max(Decimal("0"), min(amount, base)))
