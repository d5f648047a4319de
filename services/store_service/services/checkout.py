"""Checkout orchestration.

Order of operations is fixed:
  1. validate the cart, coupon and BBM Bucks redemption (nothing written)
  2. persist the order together with the BBM Bucks debit (the only step
     that can fail the checkout)
  3. record coupon usage
  4. award BBM Bucks
  5. hand the order confirmation to the Communications Service

Steps 3 to 5 are best effort. Their failures are logged and reported as
flags on the result; the stored order is never rolled back.
"""

import uuid
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.currency import to_decimal
from libs.common.emails.client import EmailClient
from libs.common.errors import GENERIC_RETRY_MESSAGE, DomainError, InfrastructureError
from libs.common.logging import get_logger
from services.coupon_service.schemas import CouponApplication, OrderContext
from services.coupon_service.services import CouponEngine
from services.loyalty_service.services import LoyaltyLedger, validate_redemption
from services.store_service.models import (
    AwardBase,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.store_service.schemas import (
    CheckoutRequest,
    CheckoutResult,
    CheckoutTotals,
    LoyaltyOutcome,
    NotificationResult,
    OrderResponse,
)
from services.store_service.services.notifications import (
    build_order_confirmation,
    send_order_confirmation,
)
from services.store_service.services.pricing import (
    award_amount_for,
    compute_subtotal,
    compute_totals,
)
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _failure(
    error: str,
    error_code: str,
    *,
    retryable: bool = False,
    coupon: Optional[CouponApplication] = None,
    totals: Optional[CheckoutTotals] = None,
) -> CheckoutResult:
    return CheckoutResult(
        success=False,
        error=error,
        error_code=error_code,
        retryable=retryable,
        coupon=coupon,
        totals=totals,
    )


class CheckoutOrchestrator:
    """Sequences one checkout across the coupon engine, ledger and notifier.

    All collaborators are passed in; the orchestrator holds no global state.
    The ledger must share ``db``: the BBM Bucks debit is committed in the
    same transaction as the order, so a discount is never stored without it.
    """

    def __init__(
        self,
        db: AsyncSession,
        ledger: LoyaltyLedger,
        coupons: CouponEngine,
        email_client: EmailClient,
        award_base: AwardBase = AwardBase.SUBTOTAL,
        store_name: str = "Build Bharat Mart",
    ):
        self.db = db
        self.ledger = ledger
        self.coupons = coupons
        self.email_client = email_client
        self.award_base = AwardBase(award_base)
        self.store_name = store_name

    async def place_order(
        self, request: CheckoutRequest, user: Optional[AuthUser] = None
    ) -> CheckoutResult:
        user_id = user.user_id if user else None

        # -- 1. Validate -------------------------------------------------
        if not request.items:
            return _failure("Your cart is empty", "empty_cart")
        if request.redeem_points and not user_id:
            return _failure("Sign in to redeem BBM Bucks", "login_required")

        customer_email = request.customer.email or (user.email if user else None)
        if not customer_email:
            return _failure(
                "An email address is required to place an order", "email_required"
            )
        customer_name = (
            request.customer.name
            or (user.name if user else None)
            or str(customer_email).split("@")[0]
        )
        if request.payment_method != PaymentMethod.COD and not request.payment_reference:
            return _failure(
                "Payment reference is required for online payments",
                "payment_reference_required",
            )

        order_ctx = OrderContext(
            items=request.items, subtotal=compute_subtotal(request.items)
        )
        coupon: Optional[CouponApplication] = None
        if request.coupon_code and request.coupon_code.strip():
            coupon = await self.coupons.validate_and_apply(
                request.coupon_code, order_ctx, user_id
            )
            if not coupon.is_valid:
                return _failure(
                    coupon.error or "Invalid coupon",
                    coupon.error_code or "invalid_coupon",
                    retryable=coupon.retryable,
                    coupon=coupon,
                )

        points = request.redeem_points
        if points:
            coupon_discount = (
                coupon.discount_amount if coupon and not coupon.free_shipping else 0
            )
            try:
                balance = await self.ledger.get_balance(user_id)
                validate_redemption(
                    points,
                    balance.current_balance,
                    to_decimal(order_ctx.subtotal) - to_decimal(coupon_discount),
                    order_ctx.categories,
                )
            except DomainError as exc:
                return _failure(
                    exc.message, exc.code, retryable=exc.retryable, coupon=coupon
                )

        totals = compute_totals(order_ctx.subtotal, coupon, points)
        award_amount = award_amount_for(totals, self.award_base)

        # -- 2. Persist the order ----------------------------------------
        order = Order(
            order_number=Order.generate_order_number(),
            user_id=user_id,
            customer_name=customer_name,
            customer_email=str(customer_email),
            customer_phone=request.customer.phone or (user.phone if user else None),
            shipping_address=(
                request.shipping_address.model_dump()
                if request.shipping_address
                else None
            ),
            gstin=request.gstin,
            subtotal=totals.subtotal,
            coupon_code=coupon.code if coupon else None,
            coupon_discount=totals.coupon_discount,
            loyalty_points_redeemed=totals.loyalty_points_redeemed,
            loyalty_discount=totals.loyalty_discount,
            shipping_fee=totals.shipping,
            shipping_savings=totals.shipping_savings,
            tax=totals.tax,
            total=totals.total,
            loyalty_award_base=self.award_base,
            loyalty_award_amount=award_amount,
            loyalty_points_earned=0,
            payment_method=request.payment_method,
            payment_status=(
                PaymentStatus.PENDING
                if request.payment_method == PaymentMethod.COD
                else PaymentStatus.SUCCESS
            ),
            payment_reference=request.payment_reference,
            status=OrderStatus.PLACED,
            is_guest=user_id is None,
            customer_notes=request.notes,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    product_name=item.product_name or "Product",
                    category=item.category,
                    quantity=item.quantity,
                    unit_price=item.price,
                    line_total=item.line_total,
                )
                for item in request.items
            ],
        )
        self.db.add(order)
        if points:
            # The balance may have moved since it was read above
            try:
                await self.ledger.redeem(
                    user_id=user_id,
                    redeem_amount=points,
                    order_id=order.order_number,
                    commit=False,
                )
            except DomainError as exc:
                await self.db.rollback()
                logger.warning(
                    "Checkout for %s refused: redeeming %d BBM Bucks failed (%s)",
                    user_id,
                    points,
                    exc.code,
                )
                return _failure(
                    exc.message,
                    exc.code,
                    retryable=exc.retryable,
                    coupon=coupon,
                    totals=totals,
                )
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Failed to store order for user %s", user_id or "guest")
            return _failure(
                GENERIC_RETRY_MESSAGE,
                InfrastructureError.code,
                retryable=True,
                coupon=coupon,
                totals=totals,
            )

        # Snapshot now: later rollbacks in side effects expire ORM state
        snapshot = OrderResponse.model_validate(order)
        order_id = snapshot.id
        order_number = snapshot.order_number
        logger.info(
            "Placed order %s for %s: total=%s coupon=%s points_redeemed=%d",
            order_number,
            user_id or "guest",
            totals.total,
            snapshot.coupon_code,
            points,
        )

        # -- 3. Coupon usage ---------------------------------------------
        coupon_usage_recorded = False
        if coupon and coupon.coupon_id:
            try:
                await self.coupons.record_usage(coupon.coupon_id, user_id, order_number)
                coupon_usage_recorded = True
            except Exception:
                logger.exception(
                    "Order %s placed but coupon %s usage was not recorded",
                    order_number,
                    coupon.code,
                )

        # -- 4. Loyalty ----------------------------------------------------
        loyalty = LoyaltyOutcome(
            points_redeemed=points,
            award_base=self.award_base,
            award_amount=award_amount,
        )
        if user_id:
            loyalty = await self._award_loyalty(
                loyalty, user_id, order_id, order_number, order_ctx.categories
            )
            snapshot.loyalty_points_earned = loyalty.points_earned

        # -- 5. Notification ----------------------------------------------
        notification = await self._notify(snapshot, request)

        return CheckoutResult(
            success=True,
            order_number=order_number,
            order=snapshot,
            totals=totals,
            coupon=coupon,
            coupon_usage_recorded=coupon_usage_recorded,
            loyalty=loyalty,
            notification=notification,
        )

    async def _award_loyalty(
        self,
        loyalty: LoyaltyOutcome,
        user_id: str,
        order_id: uuid.UUID,
        order_number: str,
        categories: list[str],
    ) -> LoyaltyOutcome:
        """Credit BBM Bucks for a placed order. Never raises."""
        try:
            reward = await self.ledger.award(
                user_id=user_id,
                order_id=order_number,
                order_amount=loyalty.award_amount,
                categories=categories,
            )
            loyalty.points_earned = reward.points
            loyalty.tier = reward.tier
        except Exception:
            loyalty.missed_reward = True
            logger.exception(
                "Order %s placed but BBM Bucks award for %s failed",
                order_number,
                user_id,
            )
            return loyalty

        if reward.points > 0:
            try:
                await self.db.execute(
                    update(Order)
                    .where(Order.id == order_id)
                    .values(loyalty_points_earned=reward.points)
                    .execution_options(synchronize_session=False)
                )
                await self.db.commit()
            except SQLAlchemyError:
                await self.db.rollback()
                logger.exception(
                    "Could not store points earned on order %s", order_number
                )
        return loyalty

    async def _notify(
        self, order: OrderResponse, request: CheckoutRequest
    ) -> NotificationResult:
        confirmation = build_order_confirmation(
            order,
            self.store_name,
            request.shipping_address.one_line() if request.shipping_address else None,
        )
        return await send_order_confirmation(
            self.email_client, confirmation, is_guest=order.is_guest
        )
