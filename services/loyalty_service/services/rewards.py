"""BBM Bucks reward rules: pure functions, no I/O.

100 BBM Bucks = ₹1. Rewards are a percentage of the order amount chosen by
tier, truncated (never rounded) to whole points.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.currency import (
    POINTS_PER_RUPEE,
    Number,
    floor_int,
    points_to_rupees,
    rupees_to_points,
    to_decimal,
)
from services.loyalty_service.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    MinimumRedemptionError,
    RedemptionNotAllowedError,
)
from services.loyalty_service.models.enums import RewardTierName
from services.loyalty_service.schemas import RewardCalculation

# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------
CONVERSION_RATE = POINTS_PER_RUPEE
MINIMUM_REDEMPTION = 50  # 50 BBM Bucks = ₹0.50
EXPIRY_MONTHS = 12
EXPIRY_DAYS = EXPIRY_MONTHS * 30  # 30-day months, not calendar months
MAX_REDEEM_FRACTION = Decimal("0.5")  # at most half the order value

EXCLUDED_CATEGORIES = frozenset(
    {
        "gift-cards",
        "warranties",
        "installation-services",
    }
)


@dataclass(frozen=True)
class RewardTier:
    name: RewardTierName
    min_amount: Decimal
    max_amount: Optional[Decimal]  # exclusive; None = unbounded
    percentage: Decimal

    def contains(self, amount: Decimal) -> bool:
        if amount < self.min_amount:
            return False
        return self.max_amount is None or amount < self.max_amount


REWARD_TIERS: tuple[RewardTier, ...] = (
    RewardTier(RewardTierName.STANDARD, Decimal("0"), Decimal("25000"), Decimal("1.0")),
    RewardTier(RewardTierName.PREMIUM, Decimal("25000"), Decimal("50000"), Decimal("1.5")),
    RewardTier(RewardTierName.ELITE, Decimal("50000"), None, Decimal("2.0")),
)


def _normalized(categories: Optional[Iterable[Optional[str]]]) -> list[str]:
    return [c.lower() for c in (categories or []) if c]


def has_excluded_category(categories: Optional[Iterable[Optional[str]]]) -> bool:
    """Case-insensitive exact match against EXCLUDED_CATEGORIES."""
    return any(c in EXCLUDED_CATEGORIES for c in _normalized(categories))


def tier_for_amount(order_amount: Number) -> RewardTier:
    amount = to_decimal(order_amount)
    if amount < 0:
        raise InvalidAmountError("Order amount cannot be negative")
    for tier in REWARD_TIERS:
        if tier.contains(amount):
            return tier
    # Tiers partition [0, inf), so this is unreachable for valid input
    raise InvalidAmountError(f"No reward tier for amount {amount}")


def calculate_reward(
    order_amount: Number, categories: Optional[Iterable[Optional[str]]] = None
) -> RewardCalculation:
    """Compute the BBM Bucks earned on an order.

    Orders containing an excluded category earn nothing. Otherwise
    ``points = floor(order_amount * percentage / 100 * CONVERSION_RATE)``.
    Tier boundaries belong to the higher tier (25000 is Premium).
    """
    if has_excluded_category(categories):
        return RewardCalculation(
            points=0,
            percentage=Decimal("0"),
            discount_value=Decimal("0.00"),
            tier=RewardTierName.EXCLUDED.value,
            conversion_rate=CONVERSION_RATE,
            reason="Order contains excluded categories",
        )

    amount = to_decimal(order_amount)
    tier = tier_for_amount(amount)
    points = floor_int(amount * tier.percentage / 100 * CONVERSION_RATE)

    return RewardCalculation(
        points=points,
        percentage=tier.percentage,
        discount_value=points_to_rupees(points),
        tier=tier.name.value,
        conversion_rate=CONVERSION_RATE,
        reason=None if points > 0 else "Order amount too low",
    )


def get_max_redeemable_amount(current_balance: int, order_amount: Number) -> int:
    """Largest redemption allowed for an order.

    The lowest of: half the order value in points, the balance rounded down to
    a multiple of MINIMUM_REDEMPTION, and the raw balance.
    """
    max_from_order = rupees_to_points(to_decimal(order_amount) * MAX_REDEEM_FRACTION)
    max_from_balance = (current_balance // MINIMUM_REDEMPTION) * MINIMUM_REDEMPTION
    return max(0, min(max_from_order, max_from_balance, current_balance))


def can_use_bucks(
    order_amount: Number, categories: Optional[Iterable[Optional[str]]] = None
) -> bool:
    """BBM Bucks may be spent on any non-empty order without excluded items."""
    return not has_excluded_category(categories) and to_decimal(order_amount) > 0


def minimum_redemption_message() -> str:
    return (
        f"Minimum redemption is {MINIMUM_REDEMPTION} BBM Bucks "
        f"(₹{points_to_rupees(MINIMUM_REDEMPTION)})"
    )


def validate_redemption(
    redeem_amount: int,
    current_balance: int,
    order_amount: Number,
    categories: Optional[Iterable[Optional[str]]] = None,
) -> None:
    """Check a requested redemption against the order before anything is written.

    Raises the matching validation error; returns None when the redemption
    is allowed.
    """
    if redeem_amount < MINIMUM_REDEMPTION:
        raise MinimumRedemptionError(minimum_redemption_message())
    if not can_use_bucks(order_amount, categories):
        raise RedemptionNotAllowedError(
            "BBM Bucks cannot be used on orders with excluded items"
        )
    if current_balance < redeem_amount:
        raise InsufficientBalanceError("Insufficient BBM Bucks balance")
    max_allowed = get_max_redeemable_amount(current_balance, order_amount)
    if redeem_amount > max_allowed:
        raise RedemptionNotAllowedError(
            f"You can redeem at most {max_allowed} BBM Bucks on this order"
        )
