"""FastAPI dependency providers for the Loyalty Service."""

from fastapi import Depends
from libs.db.session import get_async_db
from services.loyalty_service.services.ledger import LoyaltyLedger
from sqlalchemy.ext.asyncio import AsyncSession


async def get_loyalty_ledger(
    db: AsyncSession = Depends(get_async_db),
) -> LoyaltyLedger:
    return LoyaltyLedger(db)
