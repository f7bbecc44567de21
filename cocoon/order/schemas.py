"""Order domain schemas.

Read models mirror the documents produced by the order pipeline: stored
field names, ids rendered as strings and the joined display fields on each
line item.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cocoon.core.responses import Pagination
from cocoon.db.document import ObjectIdStr
from cocoon.order.models import Address, OrderStatus, PaymentMethod


class BuyerRead(BaseModel):
    name: str
    phone_number: str
    address: Address = Field(default_factory=Address)


class LineItemRead(BaseModel):
    product_id: ObjectIdStr
    variant_id: ObjectIdStr
    quantity: int
    unit_price: float
    discount_percent: float = 0
    product_name: str | None = None
    product_img: str | None = None
    variant_name: str | None = None
    variant_img: str | None = None
    total_price: float | None = None


class OrderRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(alias="_id")
    order_id: str
    user_id: ObjectIdStr | None = None
    order_buyer: BuyerRead
    order_products: list[LineItemRead]
    order_note: str = ""
    payment_method: PaymentMethod
    applied_coupons: list[ObjectIdStr] = Field(default_factory=list)
    total_products_cost: float = 0
    shipping_cost: float = 0
    final_cost: float = 0
    order_status: OrderStatus
    payment_link: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class OrderPage(BaseModel):
    orders: list[OrderRead]
    pagination: Pagination


class OrderStatusRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(alias="_id")
    order_id: str
    order_status: OrderStatus
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
