"""Coupon validation pipeline, usage recording and admin CRUD."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import Number, format_rupees, to_decimal
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.errors import DomainValidationError, InfrastructureError, NotFoundError
from libs.common.logging import get_logger
from services.coupon_service.models import Coupon, DiscountType, UserCouponUsage
from services.coupon_service.schemas import (
    CouponApplication,
    CouponCreate,
    CouponUpdate,
    OrderContext,
)
from services.coupon_service.services.rules import (
    STANDARD_SHIPPING_COST,
    active_user_ids,
    compute_discount,
    discount_base,
    item_is_applicable,
    item_is_excluded,
    normalize_code,
)
from sqlalchemy import desc, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

VALIDATION_RETRY_MESSAGE = "Failed to validate coupon. Please try again."


def _in_window(coupon: Coupon, now: datetime) -> bool:
    valid_from = as_utc(coupon.valid_from)
    valid_until = as_utc(coupon.valid_until)
    if valid_from and valid_from > now:
        return False
    if valid_until and valid_until < now:
        return False
    return True


def _under_global_limit(coupon: Coupon) -> bool:
    return coupon.usage_limit is None or coupon.usage_count < coupon.usage_limit


class CouponEngine:
    """Coupon operations bound to one DB session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_code(self, code: str) -> Optional[Coupon]:
        result = await self.db.execute(
            select(Coupon).where(Coupon.code == normalize_code(code))
        )
        return result.scalar_one_or_none()

    async def get_user_usage_count(self, coupon_id: uuid.UUID, user_id: str) -> int:
        result = await self.db.execute(
            select(UserCouponUsage.usage_count).where(
                UserCouponUsage.coupon_id == coupon_id,
                UserCouponUsage.user_id == user_id,
            )
        )
        return result.scalar_one_or_none() or 0

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate_and_apply(
        self,
        code: str,
        order: OrderContext,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CouponApplication:
        """Run the eligibility gates in order and compute the discount.

        Gates short-circuit on the first failure so the message is stable:
        exists, active, global usage limit, validity window, allow-list,
        per-user limit, minimum order, maximum order, applicable categories,
        excluded categories.
        """
        normalized = normalize_code(code)
        now = as_utc(now) or utc_now()
        try:
            coupon = await self.get_by_code(normalized)
            user_usage = 0
            if coupon and coupon.user_usage_limit and user_id:
                user_usage = await self.get_user_usage_count(coupon.id, user_id)
        except SQLAlchemyError:
            logger.exception("Coupon lookup failed for %s", normalized)
            return CouponApplication.failure(
                normalized,
                VALIDATION_RETRY_MESSAGE,
                InfrastructureError.code,
                retryable=True,
            )

        application = self._evaluate(normalized, coupon, order, user_id, user_usage, now)
        if application.is_valid:
            logger.info(
                "Coupon %s applied for user %s: discount=%s free_shipping=%s",
                normalized,
                user_id or "guest",
                application.discount_amount,
                application.free_shipping,
            )
        else:
            logger.info(
                "Coupon %s rejected for user %s: %s",
                normalized,
                user_id or "guest",
                application.error_code,
            )
        return application

    def _evaluate(
        self,
        code: str,
        coupon: Optional[Coupon],
        order: OrderContext,
        user_id: Optional[str],
        user_usage: int,
        now: datetime,
    ) -> CouponApplication:
        if coupon is None:
            return CouponApplication.failure(code, "Coupon not found", "not_found")

        if not coupon.is_active:
            return CouponApplication.failure(
                code, "This coupon is not currently active", "inactive"
            )

        if not _under_global_limit(coupon):
            return CouponApplication.failure(
                code, "This coupon has reached its usage limit", "usage_limit_reached"
            )

        valid_from = as_utc(coupon.valid_from)
        if valid_from and valid_from > now:
            return CouponApplication.failure(
                code, "This coupon is not yet valid", "not_yet_valid"
            )
        valid_until = as_utc(coupon.valid_until)
        if valid_until and valid_until < now:
            return CouponApplication.failure(code, "This coupon has expired", "expired")

        allowed_users = active_user_ids(coupon.specific_users)
        if allowed_users and (not user_id or user_id not in allowed_users):
            return CouponApplication.failure(
                code, "This coupon is not available for your account", "not_eligible"
            )

        if coupon.user_usage_limit and user_id and user_usage >= coupon.user_usage_limit:
            return CouponApplication.failure(
                code, "You have already used this coupon", "user_limit_reached"
            )

        subtotal = to_decimal(order.subtotal)
        if coupon.min_order_amount and subtotal < coupon.min_order_amount:
            return CouponApplication.failure(
                code,
                f"Minimum order amount of {format_rupees(coupon.min_order_amount)} required",
                "min_order_not_met",
            )
        if coupon.max_order_amount and subtotal > coupon.max_order_amount:
            return CouponApplication.failure(
                code,
                f"Maximum order amount is {format_rupees(coupon.max_order_amount)}",
                "max_order_exceeded",
            )

        if coupon.applicable_categories and not any(
            item_is_applicable(item.category, coupon.applicable_categories)
            for item in order.items
        ):
            return CouponApplication.failure(
                code,
                "Coupon not applicable to items in your cart",
                "no_applicable_items",
            )

        if coupon.excluded_categories and any(
            item_is_excluded(item.category, coupon.excluded_categories)
            for item in order.items
        ):
            return CouponApplication.failure(
                code,
                "Coupon not applicable due to excluded items",
                "excluded_items",
            )

        base = discount_base(
            order.items,
            subtotal,
            coupon.applicable_categories,
            coupon.excluded_categories,
        )
        is_free_shipping = coupon.discount_type == DiscountType.FREE_SHIPPING
        return CouponApplication(
            is_valid=True,
            code=coupon.code,
            coupon_id=coupon.id,
            discount_type=coupon.discount_type,
            description=coupon.description,
            discount_amount=compute_discount(
                coupon.discount_type,
                coupon.discount_value,
                base,
                coupon.max_discount,
            ),
            discount_base=base,
            free_shipping=is_free_shipping,
            shipping_savings=(
                STANDARD_SHIPPING_COST if is_free_shipping else Decimal("0.00")
            ),
        )

    # ------------------------------------------------------------------
    # Usage recording
    # ------------------------------------------------------------------

    async def record_usage(
        self,
        coupon_id: uuid.UUID,
        user_id: Optional[str],
        order_number: str,
    ) -> None:
        """Count one use of a coupon against a placed order.

        Increments the global counter and upserts the per-user row in one
        commit. Replaying the same order number for a user is a no-op.
        """
        now = utc_now()
        try:
            usage = None
            if user_id:
                result = await self.db.execute(
                    select(UserCouponUsage)
                    .where(
                        UserCouponUsage.coupon_id == coupon_id,
                        UserCouponUsage.user_id == user_id,
                    )
                    .with_for_update()
                )
                usage = result.scalar_one_or_none()
                if usage and order_number in (usage.order_numbers or []):
                    logger.info(
                        "Coupon %s usage already recorded for order %s",
                        coupon_id,
                        order_number,
                    )
                    return

            result = await self.db.execute(
                update(Coupon)
                .where(
                    Coupon.id == coupon_id,
                    Coupon.usage_limit.is_(None)
                    | (Coupon.usage_count < Coupon.usage_limit),
                )
                .values(usage_count=Coupon.usage_count + 1, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await self.db.rollback()
                found = await self.db.scalar(
                    select(Coupon.id).where(Coupon.id == coupon_id)
                )
                if found is None:
                    raise NotFoundError("Coupon not found")
                logger.warning(
                    "Coupon %s hit its usage limit before order %s was counted",
                    coupon_id,
                    order_number,
                )
                raise DomainValidationError(
                    "This coupon has reached its usage limit",
                    code="usage_limit_reached",
                )

            if user_id:
                if usage is None:
                    self.db.add(
                        UserCouponUsage(
                            user_id=user_id,
                            coupon_id=coupon_id,
                            usage_count=1,
                            last_used=now,
                            order_numbers=[order_number],
                            created_at=now,
                        )
                    )
                else:
                    usage.usage_count += 1
                    usage.last_used = now
                    # Reassign so the JSON column is flagged dirty
                    usage.order_numbers = [*(usage.order_numbers or []), order_number]

            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(
                "Failed to record coupon %s usage for order %s", coupon_id, order_number
            )
            raise InfrastructureError()

        logger.info(
            "Recorded coupon %s usage for order %s (user=%s)",
            coupon_id,
            order_number,
            user_id or "guest",
        )

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def _active_coupons(self) -> list[Coupon]:
        try:
            result = await self.db.execute(
                select(Coupon)
                .where(Coupon.is_active.is_(True))
                .order_by(desc(Coupon.created_at))
            )
        except SQLAlchemyError:
            logger.exception("Failed to list active coupons")
            raise InfrastructureError()
        return list(result.scalars().all())

    async def list_offers(self, now: Optional[datetime] = None) -> list[Coupon]:
        """Browse-all mode: every active, in-window coupon with uses left."""
        now = as_utc(now) or utc_now()
        return [
            coupon
            for coupon in await self._active_coupons()
            if _in_window(coupon, now) and _under_global_limit(coupon)
        ]

    async def list_available_for_user(
        self,
        user_id: Optional[str],
        order_amount: Number = 0,
        now: Optional[datetime] = None,
    ) -> list[Coupon]:
        """Checkout mode: coupons this user could apply to an order of this size.

        Order-amount checks are skipped when ``order_amount`` is zero.
        """
        amount = to_decimal(order_amount)
        available = []
        for coupon in await self.list_offers(now=now):
            if amount > 0:
                if coupon.min_order_amount and amount < coupon.min_order_amount:
                    continue
                if coupon.max_order_amount and amount > coupon.max_order_amount:
                    continue

            allowed_users = active_user_ids(coupon.specific_users)
            if allowed_users and (not user_id or user_id not in allowed_users):
                continue

            if user_id and coupon.user_usage_limit:
                try:
                    used = await self.get_user_usage_count(coupon.id, user_id)
                except SQLAlchemyError:
                    logger.exception("Failed to read coupon usage for %s", user_id)
                    raise InfrastructureError()
                if used >= coupon.user_usage_limit:
                    continue

            available.append(coupon)
        return available

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def create_coupon(self, payload: CouponCreate) -> Coupon:
        code = normalize_code(payload.code)
        coupon = Coupon(**payload.model_dump(exclude={"code"}), code=code)
        self.db.add(coupon)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DomainValidationError(
                f"Coupon code '{code}' already exists", code="duplicate_code"
            )
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Failed to create coupon %s", code)
            raise InfrastructureError()
        await self.db.refresh(coupon)
        logger.info("Created coupon %s (%s)", coupon.code, coupon.discount_type.value)
        return coupon

    async def list_coupons(self, include_inactive: bool = True) -> list[Coupon]:
        query = select(Coupon).order_by(desc(Coupon.created_at))
        if not include_inactive:
            query = query.where(Coupon.is_active.is_(True))
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError:
            logger.exception("Failed to list coupons")
            raise InfrastructureError()
        return list(result.scalars().all())

    async def update_coupon(self, coupon_id: uuid.UUID, payload: CouponUpdate) -> Coupon:
        try:
            coupon = await self.db.get(Coupon, coupon_id)
            if coupon is None:
                raise NotFoundError("Coupon not found")

            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(coupon, field, value)

            if (
                coupon.discount_type == DiscountType.PERCENTAGE
                and coupon.discount_value > 100
            ):
                await self.db.rollback()
                raise DomainValidationError("Percentage discount cannot exceed 100")

            await self.db.commit()
            await self.db.refresh(coupon)
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Failed to update coupon %s", coupon_id)
            raise InfrastructureError()

        logger.info("Updated coupon %s", coupon.code)
        return coupon
