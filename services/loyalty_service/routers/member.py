"""Member-facing BBM Bucks endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.currency import points_to_rupees
from libs.common.errors import DomainError, to_http_exception
from libs.common.logging import get_logger
from services.loyalty_service.dependencies import get_loyalty_ledger
from services.loyalty_service.schemas import (
    BalanceResponse,
    RewardQuoteRequest,
    RewardQuoteResponse,
    TransactionListResponse,
    TransactionResponse,
)
from services.loyalty_service.services import (
    MINIMUM_REDEMPTION,
    LoyaltyLedger,
    calculate_reward,
    can_use_bucks,
    get_max_redeemable_amount,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/loyalty", tags=["loyalty"])


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


@router.get("/me", response_model=BalanceResponse)
async def get_my_balance(
    current_user: AuthUser = Depends(get_current_user),
    ledger: LoyaltyLedger = Depends(get_loyalty_ledger),
):
    """Current BBM Bucks balance and lifetime totals."""
    try:
        return await ledger.get_balance(current_user.user_id)
    except DomainError as exc:
        raise to_http_exception(exc)


# ---------------------------------------------------------------------------
# Ledger history
# ---------------------------------------------------------------------------


@router.get("/transactions", response_model=TransactionListResponse)
async def list_my_transactions(
    limit: int = Query(10, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    ledger: LoyaltyLedger = Depends(get_loyalty_ledger),
):
    """Most recent ledger entries, newest first."""
    try:
        transactions = await ledger.get_transaction_history(
            current_user.user_id, limit=limit
        )
    except DomainError as exc:
        raise to_http_exception(exc)

    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        total=len(transactions),
    )


@router.get("/expiring", response_model=TransactionListResponse)
async def list_my_expiring(
    days: Optional[int] = Query(None, ge=1, le=365),
    current_user: AuthUser = Depends(get_current_user),
    ledger: LoyaltyLedger = Depends(get_loyalty_ledger),
):
    """Earnings that expire within the next ``days`` days."""
    window = days or get_settings().LOYALTY_EXPIRY_WARNING_DAYS
    try:
        transactions = await ledger.get_expiring(
            current_user.user_id, days_until_expiry=window
        )
    except DomainError as exc:
        raise to_http_exception(exc)

    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        total=len(transactions),
    )


# ---------------------------------------------------------------------------
# Quote
# ---------------------------------------------------------------------------


@router.post("/quote", response_model=RewardQuoteResponse)
async def quote_order(
    body: RewardQuoteRequest,
    current_user: AuthUser = Depends(get_current_user),
    ledger: LoyaltyLedger = Depends(get_loyalty_ledger),
):
    """Preview the reward and redemption ceiling for a prospective order."""
    try:
        reward = calculate_reward(body.order_amount, body.categories)
        balance = await ledger.get_balance(current_user.user_id)
    except DomainError as exc:
        raise to_http_exception(exc)

    max_redeemable = 0
    if can_use_bucks(body.order_amount, body.categories):
        max_redeemable = get_max_redeemable_amount(
            balance.current_balance, body.order_amount
        )

    return RewardQuoteResponse(
        reward=reward,
        current_balance=balance.current_balance,
        max_redeemable=max_redeemable,
        max_redeemable_value=points_to_rupees(max_redeemable),
        can_redeem=max_redeemable >= MINIMUM_REDEMPTION,
    )
