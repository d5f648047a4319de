"""Integration tests for loyalty_service endpoints."""

from datetime import timedelta
from decimal import Decimal

import pytest
from libs.common.datetime_utils import utc_now
from services.loyalty_service.services import LoyaltyLedger
from tests.conftest import make_admin_user, make_member_user, override_auth
from tests.factories import EarnedTransactionFactory, UserBalanceFactory


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(loyalty_client):
    response = await loyalty_client.get("/health")
    assert response.status_code == 200
    assert response.json()["service"] == "loyalty"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_balance_for_new_shopper(loyalty_client):
    """GET /loyalty/me: shoppers without an account read as zero."""
    response = await loyalty_client.get("/loyalty/me")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["user_id"] == "member-1"
    assert data["current_balance"] == 0
    assert data["tier"] == "Standard"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_balance_and_history_after_award(loyalty_client, db_session):
    await LoyaltyLedger(db_session).award(
        user_id="member-1", order_id="BBM-API-1", order_amount=Decimal("1000")
    )

    balance = (await loyalty_client.get("/loyalty/me")).json()
    assert balance["current_balance"] == 1000
    assert Decimal(balance["discount_value"]) == Decimal("10.00")

    response = await loyalty_client.get("/loyalty/transactions", params={"limit": 5})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["transactions"][0]["transaction_id"] == "bbm-earned-BBM-API-1"
    assert data["transactions"][0]["type"] == "EARNED"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expiring_window(loyalty_client, db_session):
    db_session.add(
        EarnedTransactionFactory.create(
            user_id="member-1",
            order_id="BBM-SOON",
            expiry_date=utc_now() + timedelta(days=7),
        )
    )
    await db_session.commit()

    soon = (await loyalty_client.get("/loyalty/expiring", params={"days": 10})).json()
    default = (await loyalty_client.get("/loyalty/expiring")).json()
    tight = (await loyalty_client.get("/loyalty/expiring", params={"days": 3})).json()

    assert soon["total"] == 1
    assert default["total"] == 1
    assert tight["total"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_quote(loyalty_client, db_session):
    db_session.add(UserBalanceFactory.create(user_id="member-1", current_balance=175))
    await db_session.commit()

    response = await loyalty_client.post(
        "/loyalty/quote", json={"order_amount": "30000", "categories": ["paints"]}
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["reward"]["points"] == 45000
    assert data["reward"]["tier"] == "Premium"
    assert data["current_balance"] == 175
    assert data["max_redeemable"] == 150
    assert data["can_redeem"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_quote_excluded_order(loyalty_client):
    response = await loyalty_client.post(
        "/loyalty/quote", json={"order_amount": "2000", "categories": ["gift-cards"]}
    )

    data = response.json()
    assert data["reward"]["points"] == 0
    assert data["max_redeemable"] == 0
    assert data["can_redeem"] is False


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expire_requires_admin(loyalty_client):
    response = await loyalty_client.post("/admin/loyalty/expire")
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_expiry_sweep(loyalty_client, db_session):
    from services.loyalty_service.app.main import app

    db_session.add(UserBalanceFactory.create(user_id="member-7", current_balance=800))
    db_session.add(
        EarnedTransactionFactory.create(
            user_id="member-7",
            order_id="BBM-OLD",
            amount=800,
            expiry_date=utc_now() - timedelta(days=2),
        )
    )
    await db_session.commit()

    with override_auth(app, make_admin_user()):
        response = await loyalty_client.post("/admin/loyalty/expire")
        balance = await loyalty_client.get("/admin/loyalty/balances/member-7")

    assert response.status_code == 200, response.text
    assert response.json() == {"expired_transactions": 1, "total_expired": 800}
    assert balance.json()["current_balance"] == 0
    assert balance.json()["total_expired"] == 800


@pytest.mark.asyncio
@pytest.mark.integration
async def test_member_cannot_read_other_balances(loyalty_client):
    from services.loyalty_service.app.main import app

    with override_auth(app, make_member_user("member-2")):
        response = await loyalty_client.get("/admin/loyalty/balances/member-1")

    assert response.status_code == 403
