"""Alembic environment for the Store Service."""

from libs.db.migrations import run_service_migrations
from services.store_service.models import Order, OrderItem  # noqa: F401

run_service_migrations(
    version_table="alembic_version_store",
    service_tables={"store_orders", "store_order_items"},
)
