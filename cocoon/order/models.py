"""Order domain models.

Orders snapshot the buyer and the purchase prices; product and variant
display data are joined from the current catalog at read time.
"""

from enum import Enum

from pydantic import BaseModel, Field

from cocoon.core.mixins import TimestampMixin
from cocoon.db.document import Document, PyObjectId


class OrderStatus(str, Enum):
    """Order lifecycle.

    unpaid -> delivering -> delivered; unpaid or delivering -> canceled.
    canceled is terminal and nothing returns to unpaid.
    """

    unpaid = "unpaid"
    delivering = "delivering"
    delivered = "delivered"
    canceled = "canceled"


CANCELABLE_STATUSES = frozenset({OrderStatus.unpaid, OrderStatus.delivering})


class PaymentMethod(str, Enum):
    cash_on_delivery = "cod"
    online = "onl"


class Address(BaseModel):
    province: str = ""
    district: str = ""
    ward: str = ""
    street: str = ""


class Buyer(BaseModel):
    """Copy of the buyer's contact details taken when the order was placed."""

    name: str
    phone_number: str
    address: Address = Field(default_factory=Address)


class LineItem(BaseModel):
    product_id: PyObjectId
    variant_id: PyObjectId
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    discount_percent: float = Field(default=0, ge=0, le=100)


class Order(TimestampMixin, Document):
    order_id: str
    user_id: PyObjectId | None = None
    order_buyer: Buyer
    order_products: list[LineItem] = Field(min_length=1)
    order_note: str = ""
    payment_method: PaymentMethod = PaymentMethod.cash_on_delivery
    total_products_cost: float = 0
    shipping_cost: float = 0
    final_cost: float = 0
    applied_coupons: list[PyObjectId] = Field(default_factory=list)
    order_status: OrderStatus = OrderStatus.unpaid
    payment_link: str | None = None
