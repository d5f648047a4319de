"""Enum definitions for store service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class OrderStatus(str, enum.Enum):
    PLACED = "placed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    COD = "cod"
    RAZORPAY = "razorpay"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"


class AwardBase(str, enum.Enum):
    """Which checkout figure BBM Bucks are awarded on."""

    ORDER_TOTAL = "order_total"  # after discounts, tax and shipping included
    SUBTOTAL = "subtotal"  # cart value before any discount
