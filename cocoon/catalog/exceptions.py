"""Catalog domain exceptions."""

from cocoon.core.exceptions import NotFoundError


class CategoryNotFoundError(NotFoundError):
    error_type = "category_not_found"

    def __init__(self, message: str = "Category not found"):
        super().__init__(message)
