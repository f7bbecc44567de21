"""Order domain exceptions."""

from cocoon.core.exceptions import ConflictError, NotFoundError


class OrderNotFoundError(NotFoundError):
    """Raised when no order matches the requested identity."""

    error_type = "order_not_found"

    def __init__(self, message: str = "Order not found"):
        super().__init__(message)


class OrderNotCancelableError(ConflictError):
    """Raised when an order has progressed past the point of cancellation."""

    error_type = "order_not_cancelable"

    def __init__(self, message: str = "Delivered orders cannot be canceled"):
        super().__init__(message)
