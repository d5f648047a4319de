"""Order-confirmation hand-off. Best effort: never raises into checkout."""

from typing import Optional

from libs.common.emails.client import EmailClient
from libs.common.logging import get_logger
from services.store_service.models import PaymentMethod
from services.store_service.schemas import (
    NotificationResult,
    OrderConfirmationRequest,
    OrderResponse,
)

logger = get_logger(__name__)

ESTIMATED_DELIVERY = "3-5 business days"


def build_order_confirmation(
    order: OrderResponse,
    store_name: str,
    delivery_address: Optional[str] = None,
) -> OrderConfirmationRequest:
    return OrderConfirmationRequest(
        recipient=order.customer_email,
        subject=f"Order Confirmation - {order.order_number} | {store_name}",
        template_data={
            "order_number": order.order_number,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "order_items": [
                {
                    "name": item.product_name,
                    "quantity": item.quantity,
                    "price": str(item.line_total),
                }
                for item in order.items
            ],
            "order_total": str(order.total),
            "delivery_address": delivery_address or "Not specified",
            "estimated_delivery": ESTIMATED_DELIVERY,
            "payment_method": (
                "Cash on Delivery"
                if order.payment_method == PaymentMethod.COD
                else "Online Payment"
            ),
        },
        metadata={
            "user_id": order.user_id or "guest",
            "email_type": "order_confirmation",
            "order_number": order.order_number,
            "order_total": str(order.total),
            "customer_type": "guest" if order.is_guest else "registered",
        },
    )


def confirmation_copy(order_number: str, email_sent: bool, is_guest: bool) -> str:
    """Message shown to the shopper once the order is placed."""
    if email_sent:
        delivery = "A confirmation email has been sent with order details."
    else:
        delivery = "We'll share your order updates on WhatsApp."
    follow_up = (
        "Please save your order number for tracking."
        if is_guest
        else "You can track it from My Orders."
    )
    return f"Your order #{order_number} has been placed.\n\n{delivery}\n\n{follow_up}"


async def send_order_confirmation(
    email_client: EmailClient,
    confirmation: OrderConfirmationRequest,
    is_guest: bool,
) -> NotificationResult:
    order_number = confirmation.template_data.get("order_number", "")
    try:
        sent = await email_client.send_template(
            template_type=confirmation.template_type,
            to_email=confirmation.recipient,
            template_data=confirmation.template_data,
            subject=confirmation.subject,
            metadata=confirmation.metadata,
        )
        error = None if sent else "Communications Service rejected the request"
    except Exception as exc:
        logger.exception("Order confirmation for %s failed", order_number)
        sent, error = False, str(exc)

    if sent:
        logger.info(
            "Order confirmation for %s sent to %s", order_number, confirmation.recipient
        )
    else:
        logger.warning("Order confirmation for %s not sent: %s", order_number, error)

    return NotificationResult(
        success=sent,
        channel="email",
        error=error,
        confirmation_message=confirmation_copy(order_number, sent, is_guest),
    )
