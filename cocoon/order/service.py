"""Order read and cancel operations.

All reads go through build_order_pipeline; they differ only in the filters
they pass and in whether costs are recomputed from the line items.
"""

import logging
import re
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from cocoon.core.exceptions import BadRequestError
from cocoon.core.mixins import utc_now
from cocoon.core.responses import Pagination
from cocoon.db.document import parse_object_id
from cocoon.db.mongo import Collections
from cocoon.order.exceptions import OrderNotCancelableError, OrderNotFoundError
from cocoon.order.models import CANCELABLE_STATUSES, OrderStatus
from cocoon.order.pipeline import (
    BuyerPhoneIs,
    CodeStartsWith,
    HasCode,
    HasId,
    OrderFilter,
    OrderQuery,
    OwnedBy,
    build_order_pipeline,
    split_facet,
)
from cocoon.order.schemas import OrderPage, OrderRead, OrderStatusRead

logger = logging.getLogger(__name__)

PHONE_NUMBER_RE = re.compile(r"^[0-9]{10,11}$")


class OrderService:
    def __init__(self, db: Database):
        self._orders = db[Collections.ORDERS]

    def _aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return list(self._orders.aggregate(pipeline))

    def _find(
        self, filters: list[OrderFilter], *, compute_costs: bool = False
    ) -> list[OrderRead]:
        pipeline = build_order_pipeline(filters, compute_costs=compute_costs)
        docs = self._aggregate(pipeline)
        return [OrderRead.model_validate(doc) for doc in docs]

    def list_orders(self, query: OrderQuery) -> OrderPage:
        """Return one page of the owner's orders plus pagination totals."""
        page = query.page
        result = self._aggregate(build_order_pipeline(query.filters(), page=page))
        docs, total = split_facet(result[0] if result else None)

        return OrderPage(
            orders=[OrderRead.model_validate(doc) for doc in docs],
            pagination=Pagination(
                page=page.page,
                limit=page.page_size,
                total=total,
                total_pages=page.total_pages(total),
            ),
        )

    def get_order(self, owner_id: ObjectId, order_id: str) -> OrderRead:
        """Get one of the owner's orders by internal id.

        Raises:
            InvalidObjectIdError: If order_id is malformed
            OrderNotFoundError: If no such order belongs to the owner
        """
        oid = parse_object_id(order_id, "Invalid order ID")
        orders = self._find([HasId(oid), OwnedBy(owner_id)])
        if not orders:
            raise OrderNotFoundError()
        return orders[0]

    def get_by_code(self, order_code: str) -> OrderRead:
        """Get an order by its human-readable code."""
        order_code = order_code.strip()
        if not order_code:
            raise BadRequestError("Invalid order ID format")

        orders = self._find([HasCode(order_code)])
        if not orders:
            raise OrderNotFoundError()
        return orders[0]

    def track(self, code_prefix: str, phone_number: str) -> list[OrderRead]:
        """Guest order tracking by order code prefix and buyer phone.

        Costs are recomputed from the line items rather than read from the
        stored totals.

        Raises:
            BadRequestError: If either value is missing or the phone number
                is not 10-11 digits
            OrderNotFoundError: If nothing matches both values
        """
        code_prefix = code_prefix.strip()
        phone_number = phone_number.strip()
        if not code_prefix or not phone_number:
            raise BadRequestError("Order ID and phone number are required")
        if not PHONE_NUMBER_RE.match(phone_number):
            raise BadRequestError("Invalid phone number")

        orders = self._find(
            [CodeStartsWith(code_prefix), BuyerPhoneIs(phone_number)],
            compute_costs=True,
        )
        if not orders:
            raise OrderNotFoundError()
        return orders

    def cancel(self, owner_id: ObjectId, order_id: str) -> OrderStatusRead:
        """Cancel one of the owner's orders.

        Canceling an already canceled order succeeds without changes.

        Raises:
            InvalidObjectIdError: If order_id is malformed
            OrderNotFoundError: If no such order belongs to the owner
            OrderNotCancelableError: If the order was already delivered
        """
        oid = parse_object_id(order_id, "Invalid order ID")
        owned = {"_id": oid, "user_id": owner_id}

        doc = self._orders.find_one_and_update(
            {**owned, "order_status": {"$in": [s.value for s in CANCELABLE_STATUSES]}},
            {
                "$set": {
                    "order_status": OrderStatus.canceled.value,
                    "updatedAt": utc_now(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if doc is not None:
            logger.info(
                "Order %s canceled", doc["order_id"], extra={"order_id": str(oid)}
            )
            return OrderStatusRead.model_validate(doc)

        # Not updated: missing, not owned, or already in a terminal state.
        doc = self._orders.find_one(owned)
        if doc is None:
            raise OrderNotFoundError()
        if doc["order_status"] == OrderStatus.canceled.value:
            return OrderStatusRead.model_validate(doc)
        raise OrderNotCancelableError()
