"""Order-confirmation hand-off to the Communications Service."""

from typing import Any

from pydantic import BaseModel, Field


class OrderConfirmationRequest(BaseModel):
    recipient: str
    subject: str
    template_type: str = "order_confirmation"
    template_data: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
