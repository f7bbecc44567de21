"""Catalog domain schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from cocoon.core.responses import Pagination
from cocoon.db.document import ObjectIdStr


class SearchSort(str, Enum):
    newest = "newest"
    price_asc = "price_asc"
    price_desc = "price_desc"
    rating = "rating"
    best_selling = "best_selling"


class ProductSummary(BaseModel):
    """Product card data; ``price`` is the cheapest variant's price."""

    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(alias="_id")
    product_name: str
    product_img: str | None = None
    product_category: ObjectIdStr | None = None
    price: float | None = None
    product_rating: float = 0
    product_discount: int = 0
    product_sold: int = 0
    created_at: datetime | None = Field(default=None, alias="createdAt")


class ProductSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(alias="_id")
    product_name: str


class ProductPage(BaseModel):
    products: list[ProductSummary]
    pagination: Pagination


class CategoryRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(alias="_id")
    category_name: str


class CategoryProducts(CategoryRead):
    products: list[ProductSummary] = Field(default_factory=list)


class CategoryProductPage(ProductPage):
    category: CategoryRead


class CartItemRef(BaseModel):
    product_id: str
    variant_id: str


class OrderProductsRequest(BaseModel):
    items: list[CartItemRef] = Field(min_length=1, max_length=100)


class CartItemRead(BaseModel):
    """Display data for one cart entry, resolved from the current catalog."""

    product_id: ObjectIdStr
    variant_id: ObjectIdStr
    product_name: str
    product_img: str | None = None
    variant_name: str
    variant_img: str | None = None
    variant_price: float
    variant_stock: int = 0
    product_discount: int = 0
