"""Aggregation pipeline builder for order reads.

Every order read (a customer's paginated list, lookup by id, lookup by
order code, guest tracking) runs the same pipeline:

    $match      order-level predicate built from the pre-join filters
    $unwind     one row per line item
    $lookup     the line item's current product
    $addFields  product/variant display fields onto the line item
    $addFields  per-item total (only with compute_costs)
    $group      back to one document per order, items in insertion order
    $match      post-join filters (product name), any item may match
    $sort       requested field, _id as tie-breaker
    $facet      page slice + distinct order count (only when paginated)

Filters are small tagged values; a read is described by which of them it
carries, so the four reads cannot drift apart.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from bson import ObjectId

from cocoon.db.mongo import Collections
from cocoon.order.models import OrderStatus, PaymentMethod

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_SORT_FIELD = "createdAt"

SORTABLE_FIELDS = frozenset(
    {
        "createdAt",
        "updatedAt",
        "order_id",
        "order_status",
        "total_products_cost",
        "final_cost",
    }
)

# Order-level fields carried through the regrouping.
ORDER_FIELDS = (
    "order_id",
    "user_id",
    "order_buyer",
    "order_note",
    "payment_method",
    "applied_coupons",
    "total_products_cost",
    "shipping_cost",
    "final_cost",
    "order_status",
    "payment_link",
    "createdAt",
    "updatedAt",
)

# Stored orders may omit these; $first would otherwise yield null.
ORDER_FIELD_DEFAULTS: dict[str, Any] = {
    "order_note": "",
    "payment_method": PaymentMethod.cash_on_delivery.value,
    "applied_coupons": [],
    "total_products_cost": 0,
    "shipping_cost": 0,
    "final_cost": 0,
}

Stage = dict[str, Any]


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"

    @property
    def mongo(self) -> int:
        return 1 if self is SortDirection.asc else -1


def _contains(text: str) -> dict[str, str]:
    """Case-insensitive substring match with user input taken literally."""
    return {"$regex": re.escape(text), "$options": "i"}


# --- Filters -----------------------------------------------------------------
# post_join=False filters go into the first $match; post_join=True filters
# test fields that only exist after the product join.


@dataclass(frozen=True)
class OwnedBy:
    owner_id: ObjectId
    post_join: ClassVar[bool] = False

    def predicate(self) -> Stage:
        return {"user_id": self.owner_id}


@dataclass(frozen=True)
class HasId:
    order_oid: ObjectId
    post_join: ClassVar[bool] = False

    def predicate(self) -> Stage:
        return {"_id": self.order_oid}


@dataclass(frozen=True)
class HasCode:
    order_code: str
    post_join: ClassVar[bool] = False

    def predicate(self) -> Stage:
        return {"order_id": self.order_code}


@dataclass(frozen=True)
class CodeStartsWith:
    """Order codes look like ``<prefix>.<suffix>``; matches on the prefix part."""

    prefix: str
    post_join: ClassVar[bool] = False

    def predicate(self) -> Stage:
        pattern = f"^{re.escape(self.prefix)}\\."
        return {"order_id": {"$regex": pattern, "$options": "i"}}


@dataclass(frozen=True)
class HasStatus:
    status: OrderStatus
    post_join: ClassVar[bool] = False

    def predicate(self) -> Stage:
        return {"order_status": OrderStatus(self.status).value}


@dataclass(frozen=True)
class IdContains:
    """Substring of the internal id rendered as hex text."""

    fragment: str
    post_join: ClassVar[bool] = False

    def predicate(self) -> Stage:
        return {
            "$expr": {
                "$regexMatch": {
                    "input": {"$toString": "$_id"},
                    "regex": re.escape(self.fragment),
                    "options": "i",
                }
            }
        }


@dataclass(frozen=True)
class BuyerPhoneIs:
    phone_number: str
    post_join: ClassVar[bool] = False

    def predicate(self) -> Stage:
        return {"order_buyer.phone_number": self.phone_number}


@dataclass(frozen=True)
class ProductNameContains:
    """Keeps an order when any of its line items' product names match.

    Applied after regrouping so the order keeps all of its line items.
    """

    name: str
    post_join: ClassVar[bool] = True

    def predicate(self) -> Stage:
        return {"order_products.product_name": _contains(self.name)}


OrderFilter = (
    OwnedBy
    | HasId
    | HasCode
    | CodeStartsWith
    | HasStatus
    | IdContains
    | BuyerPhoneIs
    | ProductNameContains
)


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: SortDirection = SortDirection.desc

    @classmethod
    def coerce(
        cls,
        page: Any = None,
        page_size: Any = None,
        sort_field: str | None = None,
        sort_direction: str | SortDirection | None = None,
    ) -> "PageRequest":
        """Build a page request from loosely typed query values.

        Non-numeric or non-positive page numbers fall back to the defaults,
        page_size is capped, unknown sort fields fall back to createdAt and
        anything other than "asc" sorts descending.
        """
        direction = getattr(sort_direction, "value", sort_direction)
        ascending = str(direction).lower() == "asc"
        return cls(
            page=_positive_int(page, DEFAULT_PAGE),
            page_size=min(
                _positive_int(page_size, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE
            ),
            sort_field=(
                sort_field if sort_field in SORTABLE_FIELDS else DEFAULT_SORT_FIELD
            ),
            sort_direction=SortDirection.asc if ascending else SortDirection.desc,
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.page_size) if total > 0 else 0


@dataclass(frozen=True)
class OrderQuery:
    """A customer's order listing request."""

    owner_id: ObjectId
    status: OrderStatus | None = None
    order_id_fragment: str | None = None
    phone_number: str | None = None
    product_name: str | None = None
    page: PageRequest = PageRequest()

    def filters(self) -> list[OrderFilter]:
        filters: list[OrderFilter] = [OwnedBy(self.owner_id)]
        if self.status is not None:
            filters.append(HasStatus(self.status))
        if self.order_id_fragment:
            filters.append(IdContains(self.order_id_fragment))
        if self.phone_number:
            filters.append(BuyerPhoneIs(self.phone_number))
        if self.product_name:
            filters.append(ProductNameContains(self.product_name))
        return filters


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def _combine(predicates: list[Stage]) -> Stage:
    if not predicates:
        return {}
    if len(predicates) == 1:
        return predicates[0]
    return {"$and": predicates}


def _join_stages() -> list[Stage]:
    """Resolve each line item against the current product and variant.

    A line item whose product is gone keeps its place with null display
    fields.
    """
    return [
        {"$unwind": {"path": "$order_products", "preserveNullAndEmptyArrays": True}},
        {
            "$lookup": {
                "from": Collections.PRODUCTS,
                "localField": "order_products.product_id",
                "foreignField": "_id",
                "as": "_product",
            }
        },
        {"$addFields": {"_product": {"$arrayElemAt": ["$_product", 0]}}},
        {
            "$addFields": {
                "_variant": {
                    "$arrayElemAt": [
                        {
                            "$filter": {
                                "input": {
                                    "$ifNull": ["$_product.product_variants", []]
                                },
                                "as": "v",
                                "cond": {
                                    "$eq": ["$$v._id", "$order_products.variant_id"]
                                },
                            }
                        },
                        0,
                    ]
                }
            }
        },
        {
            "$addFields": {
                "order_products.product_name": {
                    "$ifNull": ["$_product.product_name", None]
                },
                "order_products.product_img": {
                    "$ifNull": [{"$arrayElemAt": ["$_product.product_imgs", 0]}, None]
                },
                "order_products.variant_name": {
                    "$ifNull": ["$_variant.variant_name", None]
                },
                "order_products.variant_img": {
                    "$ifNull": ["$_variant.variant_img", None]
                },
            }
        },
    ]


def _group_stage(compute_costs: bool) -> Stage:
    group: Stage = {"_id": "$_id"}
    for field in ORDER_FIELDS:
        if field in ORDER_FIELD_DEFAULTS:
            value = {"$ifNull": [f"${field}", ORDER_FIELD_DEFAULTS[field]]}
            group[field] = {"$first": value}
        else:
            group[field] = {"$first": f"${field}"}
    group["order_products"] = {"$push": "$order_products"}
    if compute_costs:
        group["total_products_cost"] = {"$sum": "$order_products.total_price"}
    return {"$group": group}


def build_order_pipeline(
    filters: list[OrderFilter],
    *,
    compute_costs: bool = False,
    page: PageRequest | None = None,
) -> list[Stage]:
    """Build the order read pipeline.

    Args:
        filters: Tagged filters; each contributes one predicate
        compute_costs: Recompute line totals and order costs from the items
            instead of trusting the stored totals
        page: When given, sort and wrap the result in a $facet with
            ``items`` (the page) and ``total`` (distinct order count)

    Returns:
        The list of aggregation stages
    """
    pre_join = [f.predicate() for f in filters if not f.post_join]
    post_join = [f.predicate() for f in filters if f.post_join]

    pipeline: list[Stage] = [{"$match": _combine(pre_join)}]
    pipeline.extend(_join_stages())

    if compute_costs:
        pipeline.append(
            {
                "$addFields": {
                    "order_products.total_price": {
                        "$multiply": [
                            "$order_products.unit_price",
                            "$order_products.quantity",
                        ]
                    }
                }
            }
        )

    pipeline.append(_group_stage(compute_costs))
    # Orders stored without items come back with one placeholder row.
    pipeline.append(
        {
            "$addFields": {
                "order_products": {
                    "$filter": {
                        "input": "$order_products",
                        "as": "item",
                        "cond": {"$gt": ["$$item.product_id", None]},
                    }
                }
            }
        }
    )

    if compute_costs:
        pipeline.append(
            {
                "$addFields": {
                    "final_cost": {
                        "$add": [
                            "$total_products_cost",
                            {"$ifNull": ["$shipping_cost", 0]},
                        ]
                    }
                }
            }
        )

    if post_join:
        pipeline.append({"$match": _combine(post_join)})

    if page is None:
        # $group output order is unspecified; keep single lookups stable.
        pipeline.append({"$sort": {"createdAt": -1, "_id": -1}})
        return pipeline

    direction = page.sort_direction.mongo
    pipeline.append({"$sort": {page.sort_field: direction, "_id": direction}})
    pipeline.append(
        {
            "$facet": {
                "items": [{"$skip": page.skip}, {"$limit": page.page_size}],
                "total": [{"$count": "count"}],
            }
        }
    )
    return pipeline


def split_facet(result: dict[str, Any] | None) -> tuple[list[dict[str, Any]], int]:
    """Unpack the single $facet document into (items, total)."""
    if not result:
        return [], 0
    total_rows = result.get("total") or []
    total = total_rows[0]["count"] if total_rows else 0
    return result.get("items", []), total
