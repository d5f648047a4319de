"""Integration tests for coupon_service endpoints."""

from decimal import Decimal

import pytest
from tests.conftest import make_admin_user, override_auth
from tests.factories import CouponFactory

CART = [
    {"product_name": "Apex Emulsion 10L", "category": "Paints", "price": 600, "quantity": 2},
    {"product_name": "Floor Tile Box", "category": "tiles", "price": 300, "quantity": 1},
]


async def _add_coupon(db, **overrides):
    coupon = CouponFactory.create(**overrides)
    db.add(coupon)
    await db.commit()
    return coupon


@pytest.mark.asyncio
@pytest.mark.integration
async def test_validate_coupon(coupon_client, db_session):
    """POST /coupons/validate: previews the discount without recording usage."""
    coupon = await _add_coupon(
        db_session,
        code="PAINT15",
        discount_value=Decimal("15"),
        applicable_categories=["paint"],
    )

    response = await coupon_client.post(
        "/coupons/validate", json={"code": "paint15", "items": CART}
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["is_valid"] is True
    assert data["code"] == "PAINT15"
    assert Decimal(data["discount_base"]) == Decimal("1200")
    assert Decimal(data["discount_amount"]) == Decimal("180.00")

    await db_session.refresh(coupon)
    assert coupon.usage_count == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_validate_rejection_is_not_an_http_error(coupon_client, db_session):
    await _add_coupon(db_session, code="BIGSPEND", min_order_amount=Decimal("5000"))

    response = await coupon_client.post(
        "/coupons/validate", json={"code": "BIGSPEND", "items": CART}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert data["error_code"] == "min_order_not_met"
    assert data["error"] == "Minimum order amount of ₹5000 required"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_validate_requires_items(coupon_client):
    response = await coupon_client.post(
        "/coupons/validate", json={"code": "ANY", "items": []}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_offers_and_available(coupon_client, db_session):
    await _add_coupon(db_session, code="EVERYONE")
    await _add_coupon(db_session, code="MEMBERONLY", specific_users=["member-1"])
    await _add_coupon(db_session, code="OFFLINE", is_active=False)

    offers = (await coupon_client.get("/coupons/offers")).json()
    available = (
        await coupon_client.get("/coupons/available", params={"order_amount": "1500"})
    ).json()

    assert {c["code"] for c in offers["coupons"]} == {"EVERYONE", "MEMBERONLY"}
    assert {c["code"] for c in available["coupons"]} == {"EVERYONE", "MEMBERONLY"}
    assert "specific_users" not in offers["coupons"][0]


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_create_list_update(coupon_client):
    from services.coupon_service.app.main import app

    payload = {
        "code": "monsoon20",
        "description": "Monsoon sale",
        "discount_type": "percentage",
        "discount_value": "20",
        "max_discount": "500",
        "specific_users": ["member-1"],
    }
    with override_auth(app, make_admin_user()):
        created = await coupon_client.post("/admin/coupons", json=payload)
        duplicate = await coupon_client.post("/admin/coupons", json=payload)
        listed = await coupon_client.get("/admin/coupons")
        coupon_id = created.json()["id"]
        updated = await coupon_client.patch(
            f"/admin/coupons/{coupon_id}", json={"is_active": False}
        )
        active_only = await coupon_client.get(
            "/admin/coupons", params={"include_inactive": "false"}
        )

    assert created.status_code == 201, created.text
    assert created.json()["code"] == "MONSOON20"
    assert created.json()["specific_users"] == ["member-1"]

    assert duplicate.status_code == 400
    assert duplicate.json()["detail"]["code"] == "duplicate_code"

    assert [c["code"] for c in listed.json()] == ["MONSOON20"]
    assert updated.status_code == 200
    assert updated.json()["is_active"] is False
    assert active_only.json() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_rejects_invalid_percentage(coupon_client):
    from services.coupon_service.app.main import app

    with override_auth(app, make_admin_user()):
        response = await coupon_client.post(
            "/admin/coupons",
            json={"code": "HALFPLUS", "discount_type": "percentage", "discount_value": 150},
        )

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_routes_require_admin(coupon_client):
    response = await coupon_client.get("/admin/coupons")
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_update_unknown_coupon(coupon_client):
    from services.coupon_service.app.main import app

    with override_auth(app, make_admin_user()):
        response = await coupon_client.patch(
            "/admin/coupons/00000000-0000-0000-0000-000000000000",
            json={"is_active": False},
        )

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "not_found"
