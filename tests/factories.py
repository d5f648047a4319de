"""
Model and payload factories for creating valid test data.

Every model factory produces a valid, insertable SQLAlchemy instance.
Override any field via kwargs.

Usage:
    coupon = CouponFactory.create(code="SAVE10", discount_value=Decimal("10"))
    db_session.add(coupon)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_code() -> str:
    return f"TEST{uuid.uuid4().hex[:6].upper()}"


# ---------------------------------------------------------------------------
# Coupon Service
# ---------------------------------------------------------------------------


class CouponFactory:
    @staticmethod
    def create(**overrides):
        from services.coupon_service.models import Coupon, DiscountType

        defaults = {
            "id": _uuid(),
            "code": _unique_code(),
            "description": "Test coupon",
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": Decimal("10"),
            "max_discount": None,
            "min_order_amount": None,
            "max_order_amount": None,
            "applicable_categories": [],
            "excluded_categories": [],
            "specific_users": [],
            "usage_limit": None,
            "usage_count": 0,
            "user_usage_limit": None,
            "valid_from": _now() - timedelta(days=1),
            "valid_until": _now() + timedelta(days=30),
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Coupon(**defaults)


class CartItemFactory:
    @staticmethod
    def create(**overrides):
        from services.coupon_service.schemas import CartItemIn

        defaults = {
            "product_id": str(_uuid()),
            "product_name": "Asian Paints Apex 10L",
            "category": "paints",
            "price": Decimal("500.00"),
            "quantity": 1,
        }
        defaults.update(overrides)
        return CartItemIn(**defaults)


# ---------------------------------------------------------------------------
# Loyalty Service
# ---------------------------------------------------------------------------


class UserBalanceFactory:
    @staticmethod
    def create(**overrides):
        from services.loyalty_service.models import UserBalance

        balance = overrides.pop("current_balance", 0)
        defaults = {
            "user_id": f"user-{uuid.uuid4().hex[:8]}",
            "current_balance": balance,
            "total_earned": balance,
            "total_redeemed": 0,
            "total_expired": 0,
            "lifetime_balance": balance,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return UserBalance(**defaults)


class EarnedTransactionFactory:
    @staticmethod
    def create(**overrides):
        from services.loyalty_service.models import (
            LoyaltyTransaction,
            LoyaltyTransactionStatus,
            LoyaltyTransactionType,
        )

        order_id = overrides.pop("order_id", f"BBM-{uuid.uuid4().hex[:10]}")
        amount = overrides.pop("amount", 1000)
        defaults = {
            "id": _uuid(),
            "transaction_id": f"bbm-earned-{order_id}",
            "user_id": f"user-{uuid.uuid4().hex[:8]}",
            "order_id": order_id,
            "type": LoyaltyTransactionType.EARNED,
            "amount": amount,
            "order_value": Decimal(amount),
            "reward_percentage": Decimal("1.0"),
            "tier": "Standard",
            "discount_value": Decimal(amount) / 100,
            "categories": [],
            "description": f"Earned {amount} BBM Bucks (1.0% Standard reward)",
            "expiry_date": _now() + timedelta(days=360),
            "status": LoyaltyTransactionStatus.ACTIVE,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return LoyaltyTransaction(**defaults)


# ---------------------------------------------------------------------------
# Store Service
# ---------------------------------------------------------------------------


class CheckoutRequestFactory:
    @staticmethod
    def create(items=None, **overrides):
        from services.store_service.schemas import CheckoutRequest

        defaults = {
            "items": items if items is not None else [CartItemFactory.create()],
            "customer": {
                "name": "Ravi Kumar",
                "email": "ravi@example.com",
                "phone": "+919812345678",
            },
            "shipping_address": {
                "line1": "12 MG Road",
                "city": "Pune",
                "state": "Maharashtra",
                "zip": "411001",
            },
            "payment_method": "cod",
        }
        defaults.update(overrides)
        return CheckoutRequest(**defaults)
