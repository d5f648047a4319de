"""Admin BBM Bucks endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import DomainError, to_http_exception
from libs.common.logging import get_logger
from services.loyalty_service.dependencies import get_loyalty_ledger
from services.loyalty_service.schemas import BalanceResponse, ExpirySummary
from services.loyalty_service.services import LoyaltyLedger

logger = get_logger(__name__)
router = APIRouter(prefix="/admin/loyalty", tags=["admin-loyalty"])


@router.post("/expire", response_model=ExpirySummary)
async def run_expiry_sweep(
    user_id: Optional[str] = Query(None, description="Limit the sweep to one user"),
    admin: AuthUser = Depends(require_admin),
    ledger: LoyaltyLedger = Depends(get_loyalty_ledger),
):
    """Expire every earning past its expiry date (normally run by the worker)."""
    logger.info("Manual expiry sweep by %s (user=%s)", admin.user_id, user_id or "*")
    try:
        return await ledger.expire_old(user_id=user_id)
    except DomainError as exc:
        raise to_http_exception(exc)


@router.get("/balances/{user_id}", response_model=BalanceResponse)
async def get_user_balance(
    user_id: str,
    _admin: AuthUser = Depends(require_admin),
    ledger: LoyaltyLedger = Depends(get_loyalty_ledger),
):
    """Look up any shopper's BBM Bucks balance."""
    try:
        return await ledger.get_balance(user_id)
    except DomainError as exc:
        raise to_http_exception(exc)
