"""Store checkout and order lookup endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from libs.auth.dependencies import get_optional_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.dependencies import get_checkout_orchestrator
from services.store_service.models import Order
from services.store_service.schemas import (
    CheckoutRequest,
    CheckoutResult,
    OrderResponse,
)
from services.store_service.services import CheckoutOrchestrator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(tags=["store"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post("/checkout", response_model=CheckoutResult)
async def checkout(
    payload: CheckoutRequest,
    response: Response,
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    orchestrator: CheckoutOrchestrator = Depends(get_checkout_orchestrator),
):
    """
    Place an order for the cart.

    Signed-in shoppers may redeem BBM Bucks and earn them on the order; guests
    must supply an email. The body is always a CheckoutResult: 201 when the
    order was placed, 400 for a correctable rejection, 503 when the store
    failed and the request can be retried.
    """
    result = await orchestrator.place_order(payload, current_user)
    if result.success:
        response.status_code = status.HTTP_201_CREATED
    elif result.retryable:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


# ============================================================================
# ORDER LOOKUP
# ============================================================================


@router.get("/orders/{order_number}", response_model=OrderResponse)
async def get_order(
    order_number: str,
    email: Optional[str] = Query(None, description="Guest lookups only"),
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Fetch an order by number.

    Signed-in shoppers see their own orders; guests look up by order number
    plus the email used at checkout.
    """
    result = await db.execute(
        select(Order)
        .where(Order.order_number == order_number)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()

    if order:
        if current_user and (
            current_user.is_admin or order.user_id == current_user.user_id
        ):
            return order
        if (
            order.is_guest
            and email
            and order.customer_email.lower() == email.strip().lower()
        ):
            return order

    raise HTTPException(status_code=404, detail="Order not found")
