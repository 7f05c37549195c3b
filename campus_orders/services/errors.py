"""
Domain errors for the order workflow

Every error carries a stable machine-readable code, the HTTP status the API
renders it with, and a message safe to show to the caller.
"""
from typing import Any, Dict, Optional


class OrderServiceError(Exception):
    """Base class for all order workflow errors"""
    code = "ORDER_SERVICE_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class OrderValidationError(OrderServiceError):
    """Malformed order request, rejected before any catalog lookup"""
    code = "VALIDATION_ERROR"
    status_code = 422


class EmptyOrder(OrderServiceError):
    code = "NO_ITEMS_IN_ORDER"

    def __init__(self):
        super().__init__("An order must contain at least one product")


class ProductNotFound(OrderServiceError):
    code = "PRODUCT_NOT_FOUND"
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__(f"Product with id {product_id} not found", {"product_id": product_id})
        self.product_id = product_id


class ProductUnavailable(OrderServiceError):
    code = "PRODUCT_NOT_AVAILABLE"

    def __init__(self, product_id: int, name: str):
        super().__init__(
            f'Product "{name}" is not available',
            {"product_id": product_id, "name": name}
        )
        self.product_id = product_id
        self.name = name


class MinimumOrderNotMet(OrderServiceError):
    code = "MINIMUM_ORDER_NOT_MET"

    def __init__(self, subtotal, minimum):
        super().__init__(
            f"The minimum order amount is {minimum}",
            {"subtotal": str(subtotal), "minimum": str(minimum)}
        )
        self.subtotal = subtotal
        self.minimum = minimum


class OrderAmountTooLarge(OrderServiceError):
    code = "ORDER_AMOUNT_TOO_LARGE"

    def __init__(self, total, maximum):
        super().__init__(
            f"The order total cannot exceed {maximum}",
            {"total": str(total), "maximum": str(maximum)}
        )
        self.total = total
        self.maximum = maximum


class OrderNotFound(OrderServiceError):
    code = "ORDER_NOT_FOUND"
    status_code = 404

    def __init__(self, order_id: int):
        super().__init__(f"Order with id {order_id} not found", {"order_id": order_id})
        self.order_id = order_id


class OrderAccessDenied(OrderServiceError):
    code = "ORDER_ACCESS_DENIED"
    status_code = 403

    def __init__(self, message: str = "You do not have permission to modify this order"):
        super().__init__(message)


class OrderCannotBeCancelled(OrderServiceError):
    code = "ORDER_CANNOT_BE_CANCELLED"

    def __init__(self, order_id: int, status):
        super().__init__(
            "Only PENDING orders can be cancelled",
            {"order_id": order_id, "status": getattr(status, "value", status)}
        )
        self.order_id = order_id
        self.status = status


class InvalidStatusTransition(OrderServiceError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, from_status, to_status):
        from_value = getattr(from_status, "value", from_status)
        to_value = getattr(to_status, "value", to_status)
        super().__init__(
            f"Cannot change order status from {from_value} to {to_value}",
            {"from": from_value, "to": to_value}
        )
        self.from_status = from_status
        self.to_status = to_status


class NotificationNotFound(OrderServiceError):
    code = "NOTIFICATION_NOT_FOUND"
    status_code = 404

    def __init__(self, notification_id: int):
        super().__init__(f"Notification with id {notification_id} not found")
        self.notification_id = notification_id


class NotificationAccessDenied(OrderServiceError):
    code = "NOTIFICATION_ACCESS_DENIED"
    status_code = 403

    def __init__(self):
        super().__init__("You do not have permission to access this notification")


class NotificationDeleteDenied(OrderServiceError):
    code = "NOTIFICATION_DELETE_DENIED"
    status_code = 403

    def __init__(self):
        super().__init__("You do not have permission to delete this notification")


class InternalFailure(OrderServiceError):
    """Unexpected persistence failure; the cause is logged, never returned"""
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
