"""FastAPI dependency providers for the Store Service."""

from fastapi import Depends
from libs.common.config import get_settings
from libs.common.emails.client import EmailClient, get_email_client
from libs.db.session import get_async_db
from services.coupon_service.services import CouponEngine
from services.loyalty_service.services import LoyaltyLedger
from services.store_service.models import AwardBase
from services.store_service.services.checkout import CheckoutOrchestrator
from sqlalchemy.ext.asyncio import AsyncSession


async def get_checkout_orchestrator(
    db: AsyncSession = Depends(get_async_db),
    email_client: EmailClient = Depends(get_email_client),
) -> CheckoutOrchestrator:
    settings = get_settings()
    return CheckoutOrchestrator(
        db,
        ledger=LoyaltyLedger(db),
        coupons=CouponEngine(db),
        email_client=email_client,
        award_base=AwardBase(settings.LOYALTY_AWARD_BASE),
        store_name=settings.STORE_NAME,
    )
