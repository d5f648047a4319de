"""Background tasks for BBM Bucks maintenance."""

from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.loyalty_service.schemas import ExpirySummary
from services.loyalty_service.services.ledger import LoyaltyLedger

logger = get_logger(__name__)


async def expire_loyalty_points() -> ExpirySummary:
    """Run the expiry sweep across every shopper."""
    async for db in get_async_db():
        summary = await LoyaltyLedger(db).expire_old()
        logger.info(
            "Expiry sweep complete: %d earnings, %d BBM Bucks",
            summary.expired_transactions,
            summary.total_expired,
        )
        return summary
