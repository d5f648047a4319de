"""Loyalty Service schemas package.

IMPORTANT: Every schema class must be listed here.
"""

from services.loyalty_service.schemas.balance import (  # noqa: F401
    BalanceResponse,
    ExpirySummary,
)
from services.loyalty_service.schemas.reward import (  # noqa: F401
    RewardCalculation,
    RewardQuoteRequest,
    RewardQuoteResponse,
)
from services.loyalty_service.schemas.transaction import (  # noqa: F401
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    # Balance
    "BalanceResponse",
    "ExpirySummary",
    # Reward
    "RewardCalculation",
    "RewardQuoteRequest",
    "RewardQuoteResponse",
    # Transaction
    "TransactionListResponse",
    "TransactionResponse",
]
