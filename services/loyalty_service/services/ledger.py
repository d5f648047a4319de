"""BBM Bucks ledger: award, redeem and expire with deterministic idempotency.

Every balance mutation writes a LoyaltyTransaction in the same DB transaction.
Transaction IDs are derived from the order (``bbm-earned-<order_id>``), so a
retried award or redemption for the same order is a no-op replay.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.currency import Number, points_to_rupees, round_money
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.errors import InfrastructureError
from libs.common.logging import get_logger
from services.loyalty_service.exceptions import (
    InsufficientBalanceError,
    MinimumRedemptionError,
    RedemptionConflictError,
)
from services.loyalty_service.models import (
    LoyaltyTransaction,
    LoyaltyTransactionStatus,
    LoyaltyTransactionType,
    RewardTierName,
    UserBalance,
)
from services.loyalty_service.schemas import (
    BalanceResponse,
    ExpirySummary,
    RewardCalculation,
)
from services.loyalty_service.services.rewards import (
    CONVERSION_RATE,
    EXPIRY_DAYS,
    MINIMUM_REDEMPTION,
    calculate_reward,
    minimum_redemption_message,
)
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def ledger_transaction_id(txn_type: LoyaltyTransactionType, order_id: str) -> str:
    """Deterministic ledger key for one (type, order) pair."""
    return f"bbm-{txn_type.value.lower()}-{order_id}"


class LoyaltyLedger:
    """BBM Bucks operations bound to one DB session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_transaction(self, transaction_id: str) -> Optional[LoyaltyTransaction]:
        result = await self.db.execute(
            select(LoyaltyTransaction).where(
                LoyaltyTransaction.transaction_id == transaction_id
            )
        )
        return result.scalar_one_or_none()

    async def _lock_balance(self, user_id: str) -> Optional[UserBalance]:
        result = await self.db.execute(
            select(UserBalance)
            .where(UserBalance.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _reward_from_transaction(txn: LoyaltyTransaction) -> RewardCalculation:
        return RewardCalculation(
            points=txn.amount,
            percentage=txn.reward_percentage or Decimal("0"),
            discount_value=txn.discount_value or points_to_rupees(txn.amount),
            tier=txn.tier or RewardTierName.STANDARD.value,
            conversion_rate=CONVERSION_RATE,
        )

    # ------------------------------------------------------------------
    # Award
    # ------------------------------------------------------------------

    async def award(
        self,
        *,
        user_id: str,
        order_id: str,
        order_amount: Number,
        categories: Optional[Iterable[str]] = None,
    ) -> RewardCalculation:
        """Credit the reward for a completed order.

        Returns the calculation. Zero-point rewards (excluded categories or a
        tiny order) are returned without touching the ledger.
        """
        categories = list(categories or [])
        reward = calculate_reward(order_amount, categories)
        if reward.points <= 0:
            logger.info(
                "No BBM Bucks for order %s (user=%s): %s",
                order_id,
                user_id,
                reward.reason,
            )
            return reward

        transaction_id = ledger_transaction_id(LoyaltyTransactionType.EARNED, order_id)
        existing = await self._get_transaction(transaction_id)
        if existing:
            logger.info("Idempotent replay for %s → txn=%s", transaction_id, existing.id)
            return self._reward_from_transaction(existing)

        now = utc_now()
        tier = RewardTierName(reward.tier)
        try:
            balance = await self._lock_balance(user_id)
            if balance is None:
                balance = UserBalance(
                    user_id=user_id,
                    current_balance=0,
                    total_earned=0,
                    total_redeemed=0,
                    total_expired=0,
                    lifetime_balance=0,
                )
                self.db.add(balance)
            balance_before = balance.current_balance

            balance.current_balance += reward.points
            balance.total_earned += reward.points
            balance.lifetime_balance += reward.points
            balance.tier = tier
            balance.last_earned_amount = reward.points
            balance.last_earned_at = now
            balance.updated_at = now

            self.db.add(
                LoyaltyTransaction(
                    transaction_id=transaction_id,
                    user_id=user_id,
                    order_id=order_id,
                    type=LoyaltyTransactionType.EARNED,
                    amount=reward.points,
                    order_value=round_money(order_amount),
                    reward_percentage=reward.percentage,
                    tier=reward.tier,
                    discount_value=reward.discount_value,
                    categories=categories,
                    description=(
                        f"Earned {reward.points} BBM Bucks "
                        f"({reward.percentage}% {reward.tier} reward)"
                    ),
                    expiry_date=now + timedelta(days=EXPIRY_DAYS),
                    status=LoyaltyTransactionStatus.ACTIVE,
                    created_at=now,
                )
            )
            await self.db.commit()
        except IntegrityError:
            # A concurrent award for the same order won the unique key
            await self.db.rollback()
            existing = await self._get_transaction(transaction_id)
            if existing:
                logger.info("Concurrent award replay for %s", transaction_id)
                return self._reward_from_transaction(existing)
            logger.exception("Award for order %s violated a constraint", order_id)
            raise InfrastructureError()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Failed to award BBM Bucks for order %s", order_id)
            raise InfrastructureError()

        logger.info(
            "Awarded %d BBM Bucks to %s for order %s, balance %d→%d",
            reward.points,
            user_id,
            order_id,
            balance_before,
            balance_before + reward.points,
        )
        return reward

    # ------------------------------------------------------------------
    # Redeem
    # ------------------------------------------------------------------

    @staticmethod
    def _check_replay(
        existing: LoyaltyTransaction, user_id: str, redeem_amount: int
    ) -> None:
        if existing.user_id != user_id or -existing.amount != redeem_amount:
            raise RedemptionConflictError(
                f"Order {existing.order_id} already redeemed "
                f"{-existing.amount} BBM Bucks for another request"
            )

    async def redeem(
        self,
        *,
        user_id: str,
        redeem_amount: int,
        order_id: str,
        commit: bool = True,
    ) -> Decimal:
        """Spend BBM Bucks against an order and return the rupee discount.

        The balance check and decrement happen in one conditional UPDATE, so
        two concurrent redemptions can never overdraw the balance. With
        ``commit=False`` the debit joins the caller's unit of work and is
        committed (or rolled back) together with the caller's own writes.
        """
        if redeem_amount < MINIMUM_REDEMPTION:
            raise MinimumRedemptionError(minimum_redemption_message())

        transaction_id = ledger_transaction_id(
            LoyaltyTransactionType.REDEEMED, order_id
        )
        existing = await self._get_transaction(transaction_id)
        if existing:
            self._check_replay(existing, user_id, redeem_amount)
            logger.info("Idempotent replay for %s → txn=%s", transaction_id, existing.id)
            return round_money(existing.discount_value or points_to_rupees(-existing.amount))

        discount = points_to_rupees(redeem_amount)
        now = utc_now()
        try:
            result = await self.db.execute(
                update(UserBalance)
                .where(
                    UserBalance.user_id == user_id,
                    UserBalance.current_balance >= redeem_amount,
                )
                .values(
                    current_balance=UserBalance.current_balance - redeem_amount,
                    total_redeemed=UserBalance.total_redeemed + redeem_amount,
                    last_redeemed_amount=redeem_amount,
                    last_redeemed_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                if commit:
                    await self.db.rollback()
                raise InsufficientBalanceError("Insufficient BBM Bucks balance")

            self.db.add(
                LoyaltyTransaction(
                    transaction_id=transaction_id,
                    user_id=user_id,
                    order_id=order_id,
                    type=LoyaltyTransactionType.REDEEMED,
                    amount=-redeem_amount,
                    discount_value=discount,
                    description=f"Redeemed {redeem_amount} BBM Bucks (₹{discount})",
                    status=LoyaltyTransactionStatus.USED,
                    created_at=now,
                )
            )
            if commit:
                await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # Without commit the caller's pending writes are gone too
            existing = await self._get_transaction(transaction_id) if commit else None
            if existing:
                self._check_replay(existing, user_id, redeem_amount)
                logger.info("Concurrent redemption replay for %s", transaction_id)
                return round_money(existing.discount_value or discount)
            logger.exception("Redemption for order %s violated a constraint", order_id)
            raise InfrastructureError()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Failed to redeem BBM Bucks for order %s", order_id)
            raise InfrastructureError()

        logger.info(
            "Redeemed %d BBM Bucks from %s for order %s (₹%s)",
            redeem_amount,
            user_id,
            order_id,
            discount,
        )
        return discount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_balance(self, user_id: str) -> BalanceResponse:
        """Current totals. Shoppers without an account read as all zeros."""
        try:
            result = await self.db.execute(
                select(UserBalance)
                .where(UserBalance.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            balance = result.scalar_one_or_none()
        except SQLAlchemyError:
            logger.exception("Failed to read BBM Bucks balance for %s", user_id)
            raise InfrastructureError()

        if balance is None:
            return BalanceResponse(user_id=user_id)

        return BalanceResponse(
            user_id=balance.user_id,
            current_balance=balance.current_balance,
            total_earned=balance.total_earned,
            total_redeemed=balance.total_redeemed,
            total_expired=balance.total_expired,
            lifetime_balance=balance.lifetime_balance,
            tier=balance.tier.value,
            discount_value=points_to_rupees(balance.current_balance),
            last_earned_at=as_utc(balance.last_earned_at),
            last_redeemed_at=as_utc(balance.last_redeemed_at),
        )

    async def get_transaction_history(
        self, user_id: str, limit: int = 10
    ) -> list[LoyaltyTransaction]:
        """Most recent ledger entries first."""
        try:
            result = await self.db.execute(
                select(LoyaltyTransaction)
                .where(LoyaltyTransaction.user_id == user_id)
                .order_by(LoyaltyTransaction.created_at.desc())
                .limit(limit)
            )
        except SQLAlchemyError:
            logger.exception("Failed to read BBM Bucks history for %s", user_id)
            raise InfrastructureError()
        return list(result.scalars().all())

    async def get_expiring(
        self,
        user_id: str,
        days_until_expiry: int = 30,
        now: Optional[datetime] = None,
    ) -> list[LoyaltyTransaction]:
        """Active earnings that expire within the window, soonest first."""
        now = as_utc(now) or utc_now()
        cutoff = now + timedelta(days=days_until_expiry)
        try:
            result = await self.db.execute(
                select(LoyaltyTransaction)
                .where(
                    LoyaltyTransaction.user_id == user_id,
                    LoyaltyTransaction.type == LoyaltyTransactionType.EARNED,
                    LoyaltyTransaction.status == LoyaltyTransactionStatus.ACTIVE,
                    LoyaltyTransaction.expiry_date <= cutoff,
                )
                .order_by(LoyaltyTransaction.expiry_date.asc())
            )
        except SQLAlchemyError:
            logger.exception("Failed to read expiring BBM Bucks for %s", user_id)
            raise InfrastructureError()
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    async def expire_old(
        self, user_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> ExpirySummary:
        """Expire earnings whose expiry date has passed.

        Each expired earning is marked EXPIRED and mirrored by a negative
        EXPIRED ledger entry. The balance is reduced by the earning's amount,
        clamped so it never goes below zero (points already spent are not
        clawed back).
        """
        now = as_utc(now) or utc_now()
        query = (
            select(LoyaltyTransaction)
            .where(
                LoyaltyTransaction.type == LoyaltyTransactionType.EARNED,
                LoyaltyTransaction.status == LoyaltyTransactionStatus.ACTIVE,
                LoyaltyTransaction.expiry_date <= now,
            )
            .order_by(LoyaltyTransaction.expiry_date.asc())
        )
        if user_id:
            query = query.where(LoyaltyTransaction.user_id == user_id)

        total_expired = 0
        try:
            result = await self.db.execute(query)
            earnings = list(result.scalars().all())
            if not earnings:
                return ExpirySummary(expired_transactions=0, total_expired=0)

            balances: dict[str, Optional[UserBalance]] = {}
            for earning in earnings:
                if earning.user_id not in balances:
                    balances[earning.user_id] = await self._lock_balance(
                        earning.user_id
                    )
                balance = balances[earning.user_id]

                deducted = 0
                if balance is not None:
                    deducted = min(earning.amount, balance.current_balance)
                    balance.current_balance -= deducted
                    balance.total_expired += deducted
                    balance.updated_at = now

                earning.status = LoyaltyTransactionStatus.EXPIRED
                earning.expired_at = now
                self.db.add(
                    LoyaltyTransaction(
                        transaction_id=ledger_transaction_id(
                            LoyaltyTransactionType.EXPIRED, earning.order_id
                        ),
                        user_id=earning.user_id,
                        order_id=earning.order_id,
                        type=LoyaltyTransactionType.EXPIRED,
                        amount=-deducted,
                        discount_value=points_to_rupees(deducted),
                        description=f"Expired {deducted} BBM Bucks",
                        status=LoyaltyTransactionStatus.EXPIRED,
                        created_at=now,
                    )
                )
                total_expired += deducted

            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("BBM Bucks expiry sweep failed")
            raise InfrastructureError()

        logger.info(
            "Expired %d BBM Bucks across %d earnings",
            total_expired,
            len(earnings),
        )
        return ExpirySummary(
            expired_transactions=len(earnings), total_expired=total_expired
        )

