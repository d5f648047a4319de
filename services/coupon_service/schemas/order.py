"""Order context the coupon engine validates against."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class CartItemIn(BaseModel):
    product_id: Optional[str] = None
    product_name: str = ""
    category: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class OrderContext(BaseModel):
    """Cart items plus subtotal. Subtotal defaults to the sum of line totals."""

    items: list[CartItemIn] = Field(default_factory=list)
    subtotal: Optional[Decimal] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def default_subtotal(self):
        if self.subtotal is None:
            self.subtotal = sum((item.line_total for item in self.items), Decimal("0"))
        return self

    @property
    def categories(self) -> list[str]:
        return [item.category for item in self.items if item.category]
