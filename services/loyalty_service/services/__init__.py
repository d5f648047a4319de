"""Loyalty Service business logic."""

from services.loyalty_service.services.ledger import (  # noqa: F401
    LoyaltyLedger,
    ledger_transaction_id,
)
from services.loyalty_service.services.rewards import (  # noqa: F401
    CONVERSION_RATE,
    EXCLUDED_CATEGORIES,
    EXPIRY_DAYS,
    MAX_REDEEM_FRACTION,
    MINIMUM_REDEMPTION,
    REWARD_TIERS,
    calculate_reward,
    can_use_bucks,
    get_max_redeemable_amount,
    minimum_redemption_message,
    validate_redemption,
)

__all__ = [
    "LoyaltyLedger",
    "ledger_transaction_id",
    "CONVERSION_RATE",
    "EXCLUDED_CATEGORIES",
    "EXPIRY_DAYS",
    "MAX_REDEEM_FRACTION",
    "MINIMUM_REDEMPTION",
    "REWARD_TIERS",
    "calculate_reward",
    "can_use_bucks",
    "get_max_redeemable_amount",
    "minimum_redemption_message",
    "validate_redemption",
]
