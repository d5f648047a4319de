"""Store Service schemas package.

IMPORTANT: Every schema class must be listed here.
"""

from services.store_service.schemas.checkout import (  # noqa: F401
    AddressIn,
    CheckoutRequest,
    CheckoutResult,
    CheckoutTotals,
    CustomerIn,
    LoyaltyOutcome,
    NotificationResult,
)
from services.store_service.schemas.notification import (  # noqa: F401
    OrderConfirmationRequest,
)
from services.store_service.schemas.order import (  # noqa: F401
    OrderItemResponse,
    OrderResponse,
)

__all__ = [
    # Checkout
    "AddressIn",
    "CheckoutRequest",
    "CheckoutResult",
    "CheckoutTotals",
    "CustomerIn",
    "LoyaltyOutcome",
    "NotificationResult",
    # Notification
    "OrderConfirmationRequest",
    # Order
    "OrderItemResponse",
    "OrderResponse",
]
