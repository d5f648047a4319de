"""Store Service models package.

IMPORTANT: Every model class AND enum must be listed here.
"""

from services.store_service.models.enums import (  # noqa: F401
    AwardBase,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.store_service.models.order import Order, OrderItem  # noqa: F401

__all__ = [
    # Enums
    "AwardBase",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    # Models
    "Order",
    "OrderItem",
]
