"""Unit tests for the BBM Bucks ledger.

Tests call LoyaltyLedger directly with the db_session fixture.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from libs.common.datetime_utils import as_utc, utc_now
from services.loyalty_service.exceptions import (
    InsufficientBalanceError,
    MinimumRedemptionError,
    RedemptionConflictError,
)
from services.loyalty_service.models import (
    LoyaltyTransaction,
    LoyaltyTransactionStatus,
    LoyaltyTransactionType,
)
from services.loyalty_service.services.ledger import (
    LoyaltyLedger,
    ledger_transaction_id,
)
from sqlalchemy import func, select
from tests.factories import EarnedTransactionFactory, UserBalanceFactory


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _transactions(db, user_id):
    result = await db.execute(
        select(LoyaltyTransaction)
        .where(LoyaltyTransaction.user_id == user_id)
        .order_by(LoyaltyTransaction.created_at)
    )
    return list(result.scalars().all())


def _assert_identity(balance):
    assert balance.current_balance == (
        balance.total_earned - balance.total_redeemed - balance.total_expired
    )
    assert balance.current_balance >= 0


# ---------------------------------------------------------------------------
# award
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_ledger_transaction_id_is_deterministic():
    assert (
        ledger_transaction_id(LoyaltyTransactionType.EARNED, "BBM-1-AB12")
        == "bbm-earned-BBM-1-AB12"
    )
    assert (
        ledger_transaction_id(LoyaltyTransactionType.REDEEMED, "BBM-1-AB12")
        == "bbm-redeemed-BBM-1-AB12"
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_award_creates_balance_and_earning(db_session):
    ledger = LoyaltyLedger(db_session)

    reward = await ledger.award(
        user_id="u-award",
        order_id="BBM-100",
        order_amount=Decimal("1000"),
        categories=["paints"],
    )

    assert reward.points == 1000
    balance = await ledger.get_balance("u-award")
    assert balance.current_balance == 1000
    assert balance.total_earned == 1000
    assert balance.lifetime_balance == 1000
    assert balance.tier == "Standard"
    assert balance.discount_value == Decimal("10.00")
    _assert_identity(balance)

    [txn] = await _transactions(db_session, "u-award")
    assert txn.transaction_id == "bbm-earned-BBM-100"
    assert txn.type == LoyaltyTransactionType.EARNED
    assert txn.status == LoyaltyTransactionStatus.ACTIVE
    assert txn.amount == 1000
    expires_in = as_utc(txn.expiry_date) - utc_now()
    assert timedelta(days=359) < expires_in <= timedelta(days=360)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_award_is_idempotent_per_order(db_session):
    ledger = LoyaltyLedger(db_session)

    first = await ledger.award(
        user_id="u-replay", order_id="BBM-200", order_amount=Decimal("30000")
    )
    second = await ledger.award(
        user_id="u-replay", order_id="BBM-200", order_amount=Decimal("30000")
    )

    assert first.points == second.points == 45000
    assert second.tier == "Premium"
    balance = await ledger.get_balance("u-replay")
    assert balance.current_balance == 45000
    assert len(await _transactions(db_session, "u-replay")) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_award_excluded_order_writes_nothing(db_session):
    ledger = LoyaltyLedger(db_session)

    reward = await ledger.award(
        user_id="u-excl",
        order_id="BBM-300",
        order_amount=Decimal("5000"),
        categories=["gift-cards"],
    )

    assert reward.points == 0
    assert await _transactions(db_session, "u-excl") == []
    balance = await ledger.get_balance("u-excl")
    assert balance.current_balance == 0
    assert balance.total_earned == 0


# ---------------------------------------------------------------------------
# redeem
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_deducts_balance_and_returns_discount(db_session):
    ledger = LoyaltyLedger(db_session)
    await ledger.award(user_id="u-red", order_id="BBM-1", order_amount=Decimal("30000"))

    discount = await ledger.redeem(user_id="u-red", redeem_amount=5000, order_id="BBM-2")

    assert discount == Decimal("50.00")
    balance = await ledger.get_balance("u-red")
    assert balance.current_balance == 40000
    assert balance.total_redeemed == 5000
    assert balance.last_redeemed_at is not None
    _assert_identity(balance)

    txns = await _transactions(db_session, "u-red")
    redeemed = [t for t in txns if t.type == LoyaltyTransactionType.REDEEMED]
    assert len(redeemed) == 1
    assert redeemed[0].amount == -5000
    assert redeemed[0].transaction_id == "bbm-redeemed-BBM-2"
    assert redeemed[0].status == LoyaltyTransactionStatus.USED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_is_idempotent_per_order(db_session):
    ledger = LoyaltyLedger(db_session)
    await ledger.award(user_id="u-red2", order_id="BBM-1", order_amount=Decimal("30000"))

    await ledger.redeem(user_id="u-red2", redeem_amount=1000, order_id="BBM-2")
    replay = await ledger.redeem(user_id="u-red2", redeem_amount=1000, order_id="BBM-2")

    assert replay == Decimal("10.00")
    balance = await ledger.get_balance("u-red2")
    assert balance.current_balance == 44000
    assert balance.total_redeemed == 1000


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "user_id, redeem_amount",
    [("u-red3", 2000), ("u-other", 1000)],
)
async def test_redeem_replay_with_different_request_is_refused(
    db_session, user_id, redeem_amount
):
    ledger = LoyaltyLedger(db_session)
    await ledger.award(user_id="u-red3", order_id="BBM-1", order_amount=Decimal("30000"))
    await ledger.award(user_id="u-other", order_id="BBM-5", order_amount=Decimal("30000"))
    await ledger.redeem(user_id="u-red3", redeem_amount=1000, order_id="BBM-2")

    with pytest.raises(RedemptionConflictError) as exc_info:
        await ledger.redeem(
            user_id=user_id, redeem_amount=redeem_amount, order_id="BBM-2"
        )

    assert exc_info.value.http_status == 409
    assert (await ledger.get_balance("u-red3")).current_balance == 44000
    assert (await ledger.get_balance("u-other")).current_balance == 45000


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_without_commit_joins_caller_transaction(db_session):
    ledger = LoyaltyLedger(db_session)
    await ledger.award(user_id="u-red4", order_id="BBM-1", order_amount=Decimal("30000"))

    await ledger.redeem(
        user_id="u-red4", redeem_amount=1000, order_id="BBM-2", commit=False
    )
    await db_session.rollback()

    balance = await ledger.get_balance("u-red4")
    assert balance.current_balance == 45000
    txns = await _transactions(db_session, "u-red4")
    assert [t.type for t in txns] == [LoyaltyTransactionType.EARNED]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_below_minimum_changes_nothing(db_session):
    ledger = LoyaltyLedger(db_session)
    await ledger.award(user_id="u-min", order_id="BBM-1", order_amount=Decimal("1000"))

    with pytest.raises(MinimumRedemptionError) as exc_info:
        await ledger.redeem(user_id="u-min", redeem_amount=49, order_id="BBM-2")

    assert "Minimum redemption is 50 BBM Bucks" in exc_info.value.message
    balance = await ledger.get_balance("u-min")
    assert balance.current_balance == 1000
    assert len(await _transactions(db_session, "u-min")) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_insufficient_balance_changes_nothing(db_session):
    ledger = LoyaltyLedger(db_session)
    await ledger.award(user_id="u-poor", order_id="BBM-1", order_amount=Decimal("100"))

    with pytest.raises(InsufficientBalanceError):
        await ledger.redeem(user_id="u-poor", redeem_amount=500, order_id="BBM-2")

    balance = await ledger.get_balance("u-poor")
    assert balance.current_balance == 100
    assert balance.total_redeemed == 0
    assert len(await _transactions(db_session, "u-poor")) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_without_account_is_insufficient(db_session):
    ledger = LoyaltyLedger(db_session)

    with pytest.raises(InsufficientBalanceError):
        await ledger.redeem(user_id="u-nobody", redeem_amount=50, order_id="BBM-9")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_balance_for_unknown_user_is_zero(db_session):
    balance = await LoyaltyLedger(db_session).get_balance("u-new")

    assert balance.user_id == "u-new"
    assert balance.current_balance == 0
    assert balance.tier == "Standard"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_transaction_history_newest_first_with_limit(db_session):
    now = utc_now()
    for i in range(3):
        db_session.add(
            EarnedTransactionFactory.create(
                user_id="u-hist",
                order_id=f"BBM-H{i}",
                created_at=now - timedelta(minutes=10 - i),
            )
        )
    await db_session.commit()

    history = await LoyaltyLedger(db_session).get_transaction_history("u-hist", limit=2)

    assert [t.order_id for t in history] == ["BBM-H2", "BBM-H1"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_expiring_respects_window(db_session):
    now = utc_now()
    db_session.add(
        EarnedTransactionFactory.create(
            user_id="u-soon", order_id="BBM-S1", expiry_date=now + timedelta(days=10)
        )
    )
    db_session.add(
        EarnedTransactionFactory.create(
            user_id="u-soon", order_id="BBM-S2", expiry_date=now + timedelta(days=200)
        )
    )
    await db_session.commit()
    ledger = LoyaltyLedger(db_session)

    within_month = await ledger.get_expiring("u-soon", days_until_expiry=30, now=now)
    within_week = await ledger.get_expiring("u-soon", days_until_expiry=5, now=now)

    assert [t.order_id for t in within_month] == ["BBM-S1"]
    assert within_week == []


# ---------------------------------------------------------------------------
# expire_old
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_expire_old_clamps_to_remaining_balance(db_session):
    """Points already spent are not clawed back; the balance stops at zero."""
    db_session.add(
        UserBalanceFactory.create(
            user_id="u-exp", current_balance=300, total_earned=1000, total_redeemed=700
        )
    )
    earning = EarnedTransactionFactory.create(
        user_id="u-exp",
        order_id="BBM-E1",
        amount=1000,
        expiry_date=utc_now() - timedelta(days=1),
    )
    db_session.add(earning)
    await db_session.commit()
    ledger = LoyaltyLedger(db_session)

    summary = await ledger.expire_old()

    assert summary.expired_transactions == 1
    assert summary.total_expired == 300
    balance = await ledger.get_balance("u-exp")
    assert balance.current_balance == 0
    assert balance.total_expired == 300
    _assert_identity(balance)

    txns = await _transactions(db_session, "u-exp")
    statuses = {t.type: t for t in txns}
    assert statuses[LoyaltyTransactionType.EARNED].status == (
        LoyaltyTransactionStatus.EXPIRED
    )
    expired = statuses[LoyaltyTransactionType.EXPIRED]
    assert expired.amount == -300
    assert expired.transaction_id == "bbm-expired-BBM-E1"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_expire_old_skips_unexpired_and_is_rerunnable(db_session):
    ledger = LoyaltyLedger(db_session)
    await ledger.award(user_id="u-keep", order_id="BBM-K1", order_amount=Decimal("2000"))

    summary = await ledger.expire_old()
    assert summary.expired_transactions == 0

    later = utc_now() + timedelta(days=361)
    summary = await ledger.expire_old(now=later)
    assert summary.expired_transactions == 1
    assert summary.total_expired == 2000

    again = await ledger.expire_old(now=later)
    assert again.expired_transactions == 0
    balance = await ledger.get_balance("u-keep")
    assert balance.current_balance == 0
    _assert_identity(balance)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_expire_old_limited_to_one_user(db_session):
    past = utc_now() - timedelta(days=1)
    for user_id in ("u-a", "u-b"):
        db_session.add(UserBalanceFactory.create(user_id=user_id, current_balance=500))
        db_session.add(
            EarnedTransactionFactory.create(
                user_id=user_id, order_id=f"BBM-{user_id}", amount=500, expiry_date=past
            )
        )
    await db_session.commit()
    ledger = LoyaltyLedger(db_session)

    summary = await ledger.expire_old(user_id="u-a")

    assert summary.expired_transactions == 1
    assert (await ledger.get_balance("u-a")).current_balance == 0
    assert (await ledger.get_balance("u-b")).current_balance == 500


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "operations",
    [
        [("award", "O1", 1000), ("redeem", "O2", 500), ("award", "O3", 20000)],
        [("award", "O1", 60000), ("redeem", "O2", 50000), ("redeem", "O3", 50000)],
        [("redeem", "O1", 100), ("award", "O2", 50), ("redeem", "O3", 60)],
    ],
)
async def test_balance_identity_holds_across_operations(db_session, operations):
    ledger = LoyaltyLedger(db_session)
    for kind, order_id, value in operations:
        if kind == "award":
            await ledger.award(
                user_id="u-seq", order_id=order_id, order_amount=Decimal(value)
            )
        else:
            try:
                await ledger.redeem(
                    user_id="u-seq", redeem_amount=value, order_id=order_id
                )
            except InsufficientBalanceError:
                pass

    await ledger.expire_old(now=utc_now() + timedelta(days=400))

    balance = await ledger.get_balance("u-seq")
    _assert_identity(balance)
    count = await db_session.scalar(
        select(func.count())
        .select_from(LoyaltyTransaction)
        .where(LoyaltyTransaction.user_id == "u-seq")
    )
    assert count >= 1
