"""Subscription domain exceptions."""

from cocoon.core.exceptions import ConflictError


class AlreadySubscribedError(ConflictError):
    error_type = "already_subscribed"

    def __init__(self, message: str = "Email is already subscribed"):
        super().__init__(message)
