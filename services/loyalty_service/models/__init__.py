"""Loyalty Service models package.

Re-exports all models and enums so that:
  - ``from services.loyalty_service.models import UserBalance`` works
  - Alembic env.py sees every model class on import

IMPORTANT: Every model class AND enum must be listed here.
"""

from services.loyalty_service.models.balance import UserBalance  # noqa: F401
from services.loyalty_service.models.enums import (  # noqa: F401
    LoyaltyTransactionStatus,
    LoyaltyTransactionType,
    RewardTierName,
)
from services.loyalty_service.models.transaction import (  # noqa: F401
    LoyaltyTransaction,
)

__all__ = [
    # Enums
    "LoyaltyTransactionStatus",
    "LoyaltyTransactionType",
    "RewardTierName",
    # Models
    "UserBalance",
    "LoyaltyTransaction",
]
