"""
Order status state machine

Transition validity and notification text are static tables keyed by status.
"""
from typing import Dict, FrozenSet

from campus_orders.models.order import OrderStatus
from campus_orders.services.errors import InvalidStatusTransition


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Keyed by destination status
STATUS_MESSAGES: Dict[OrderStatus, str] = {
    OrderStatus.PREPARING: "Your order is being prepared",
    OrderStatus.READY: "Your order is ready for pickup",
    OrderStatus.DELIVERED: "Your order has been delivered",
    OrderStatus.CANCELLED: "Your order has been cancelled",
}

STATUS_UPDATED_TITLE = "Order status updated"
ORDER_CONFIRMED_TITLE = "Order confirmed"


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(current: OrderStatus, new: OrderStatus) -> None:
    """Raise InvalidStatusTransition unless current -> new is in the table"""
    if not can_transition(current, new):
        raise InvalidStatusTransition(current, new)


def status_message(order_id: int, status: OrderStatus) -> str:
    return f"Order #{order_id}: {STATUS_MESSAGES[status]}"


def confirmation_message(order_id: int) -> str:
    return f"Your order #{order_id} has been confirmed and is being processed."
