"""Catalog documents.

Products are managed outside this API; these models describe the stored
shape the catalog queries and the order join read from.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cocoon.core.mixins import utc_now
from cocoon.db.document import Document, PyObjectId


class Variant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")
    variant_name: str
    variant_img: str | None = None
    variant_price: float = Field(ge=0)
    variant_stock: int = 0


class Product(Document):
    product_name: str
    product_imgs: list[str] = Field(default_factory=list)
    product_category: PyObjectId | None = None
    product_variants: list[Variant] = Field(default_factory=list)
    product_rating: float = 0
    product_discount: int = Field(default=0, ge=0, le=100)
    product_sold: int = 0
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")


class Category(Document):
    category_name: str
