"""Alembic environment for the Coupon Service."""

from libs.db.migrations import run_service_migrations
from services.coupon_service.models import Coupon, UserCouponUsage  # noqa: F401

run_service_migrations(
    version_table="alembic_version_coupons",
    service_tables={"coupons", "user_coupon_usage"},
)
