"""Alembic environment for the Loyalty Service."""

from libs.db.migrations import run_service_migrations
from services.loyalty_service.models import LoyaltyTransaction, UserBalance  # noqa: F401

run_service_migrations(
    version_table="alembic_version_loyalty",
    service_tables={"loyalty_balances", "loyalty_transactions"},
)
