"""Shopper-facing coupon endpoints."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_optional_user
from libs.auth.models import AuthUser
from libs.common.errors import DomainError, to_http_exception
from libs.common.logging import get_logger
from services.coupon_service.dependencies import get_coupon_engine
from services.coupon_service.schemas import (
    CouponApplication,
    CouponListResponse,
    CouponResponse,
    CouponValidateRequest,
    OrderContext,
)
from services.coupon_service.services import CouponEngine

logger = get_logger(__name__)
router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/validate", response_model=CouponApplication)
async def validate_coupon(
    payload: CouponValidateRequest,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    engine: CouponEngine = Depends(get_coupon_engine),
):
    """
    Preview a coupon against a cart without recording usage.
    Rejections come back as ``is_valid=False`` with a message, not an error status.
    """
    order = OrderContext(items=payload.items, subtotal=payload.subtotal)
    return await engine.validate_and_apply(
        payload.code,
        order,
        user_id=current_user.user_id if current_user else None,
    )


@router.get("/available", response_model=CouponListResponse)
async def list_available_coupons(
    order_amount: Decimal = Query(Decimal("0"), ge=0),
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    engine: CouponEngine = Depends(get_coupon_engine),
):
    """Coupons the caller could apply at checkout for an order of this size."""
    try:
        coupons = await engine.list_available_for_user(
            current_user.user_id if current_user else None,
            order_amount=order_amount,
        )
    except DomainError as exc:
        raise to_http_exception(exc)

    return CouponListResponse(
        coupons=[CouponResponse.model_validate(c) for c in coupons],
        total=len(coupons),
    )


@router.get("/offers", response_model=CouponListResponse)
async def list_offers(engine: CouponEngine = Depends(get_coupon_engine)):
    """All currently running offers, ignoring per-user eligibility."""
    try:
        coupons = await engine.list_offers()
    except DomainError as exc:
        raise to_http_exception(exc)

    return CouponListResponse(
        coupons=[CouponResponse.model_validate(c) for c in coupons],
        total=len(coupons),
    )
