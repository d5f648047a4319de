"""Admin coupon management endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import DomainError, to_http_exception
from libs.common.logging import get_logger
from services.coupon_service.dependencies import get_coupon_engine
from services.coupon_service.schemas import (
    AdminCouponResponse,
    CouponCreate,
    CouponUpdate,
)
from services.coupon_service.services import CouponEngine

logger = get_logger(__name__)
router = APIRouter(prefix="/admin/coupons", tags=["admin-coupons"])


@router.post(
    "", response_model=AdminCouponResponse, status_code=status.HTTP_201_CREATED
)
async def create_coupon(
    payload: CouponCreate,
    admin: AuthUser = Depends(require_admin),
    engine: CouponEngine = Depends(get_coupon_engine),
):
    """Create a new coupon code."""
    try:
        coupon = await engine.create_coupon(payload)
    except DomainError as exc:
        raise to_http_exception(exc)
    logger.info("Coupon %s created by %s", coupon.code, admin.user_id)
    return coupon


@router.get("", response_model=list[AdminCouponResponse])
async def list_coupons(
    include_inactive: bool = Query(True),
    _admin: AuthUser = Depends(require_admin),
    engine: CouponEngine = Depends(get_coupon_engine),
):
    """List coupon codes, newest first."""
    try:
        return await engine.list_coupons(include_inactive=include_inactive)
    except DomainError as exc:
        raise to_http_exception(exc)


@router.patch("/{coupon_id}", response_model=AdminCouponResponse)
async def update_coupon(
    coupon_id: uuid.UUID,
    payload: CouponUpdate,
    admin: AuthUser = Depends(require_admin),
    engine: CouponEngine = Depends(get_coupon_engine),
):
    """Update a coupon's rules or deactivate it."""
    try:
        coupon = await engine.update_coupon(coupon_id, payload)
    except DomainError as exc:
        raise to_http_exception(exc)
    logger.info("Coupon %s updated by %s", coupon.code, admin.user_id)
    return coupon
