"""Store Service business logic."""

from services.store_service.services.checkout import (  # noqa: F401
    CheckoutOrchestrator,
)
from services.store_service.services.pricing import (  # noqa: F401
    SHIPPING_FEE,
    TAX_RATE,
    award_amount_for,
    compute_subtotal,
    compute_totals,
)

__all__ = [
    "CheckoutOrchestrator",
    "SHIPPING_FEE",
    "TAX_RATE",
    "award_amount_for",
    "compute_subtotal",
    "compute_totals",
]
