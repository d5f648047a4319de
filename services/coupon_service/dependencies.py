"""FastAPI dependency providers for the Coupon Service."""

from fastapi import Depends
from libs.db.session import get_async_db
from services.coupon_service.services.engine import CouponEngine
from sqlalchemy.ext.asyncio import AsyncSession


async def get_coupon_engine(db: AsyncSession = Depends(get_async_db)) -> CouponEngine:
    return CouponEngine(db)
