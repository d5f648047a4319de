"""Enums for the Loyalty Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class RewardTierName(str, enum.Enum):
    STANDARD = "Standard"
    PREMIUM = "Premium"
    ELITE = "Elite"
    EXCLUDED = "EXCLUDED"


class LoyaltyTransactionType(str, enum.Enum):
    EARNED = "EARNED"
    REDEEMED = "REDEEMED"
    EXPIRED = "EXPIRED"


class LoyaltyTransactionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"
    EXPIRED = "EXPIRED"
