"""Read-only catalog queries for the storefront.

Listings are aggregation pipelines ending in the same product-card
projection so every endpoint returns the same summary shape.
"""

import logging
import math
import re
from typing import Any

from bson import ObjectId
from pymongo.database import Database

from cocoon.catalog.exceptions import CategoryNotFoundError
from cocoon.catalog.models import Category, Product
from cocoon.catalog.schemas import (
    CartItemRead,
    CartItemRef,
    CategoryProductPage,
    CategoryProducts,
    CategoryRead,
    ProductPage,
    ProductSuggestion,
    ProductSummary,
    SearchSort,
)
from cocoon.core.responses import Pagination
from cocoon.db.document import parse_object_id
from cocoon.db.mongo import Collections

logger = logging.getLogger(__name__)

SHELF_SIZE = 10
SEARCH_PAGE_SIZE = 12
SUGGESTION_LIMIT = 5
CATEGORY_SAMPLE_SIZE = 4

SEARCH_SORTS: dict[SearchSort, dict[str, int]] = {
    SearchSort.newest: {"createdAt": -1},
    SearchSort.price_asc: {"price": 1},
    SearchSort.price_desc: {"price": -1},
    SearchSort.rating: {"product_rating": -1},
    SearchSort.best_selling: {"product_sold": -1},
}

SUMMARY_PROJECTION = {
    "product_name": 1,
    "product_img": {"$arrayElemAt": ["$product_imgs", 0]},
    "product_category": 1,
    "price": {"$min": "$product_variants.variant_price"},
    "product_rating": 1,
    "product_discount": 1,
    "product_sold": 1,
    "createdAt": 1,
}


def _contains(text: str) -> dict[str, str]:
    return {"$regex": re.escape(text), "$options": "i"}


def _with_price() -> dict[str, Any]:
    return {"$addFields": {"price": {"$min": "$product_variants.variant_price"}}}


class CatalogService:
    def __init__(self, db: Database):
        self._products = db[Collections.PRODUCTS]
        self._categories = db[Collections.CATEGORIES]

    def _summaries(self, pipeline: list[dict[str, Any]]) -> list[ProductSummary]:
        pipeline = [*pipeline, {"$project": SUMMARY_PROJECTION}]
        return [
            ProductSummary.model_validate(doc)
            for doc in self._products.aggregate(pipeline)
        ]

    def _shelf(
        self, match: dict[str, Any], sort: dict[str, int]
    ) -> list[ProductSummary]:
        return self._summaries(
            [
                {"$match": match},
                {"$sort": {**sort, "_id": -1}},
                {"$limit": SHELF_SIZE},
            ]
        )

    def newest(self) -> list[ProductSummary]:
        return self._shelf({}, {"createdAt": -1})

    def top_rated(self) -> list[ProductSummary]:
        return self._shelf({}, {"product_rating": -1})

    def discounted(self) -> list[ProductSummary]:
        return self._shelf({"product_discount": {"$gt": 0}}, {"product_discount": -1})

    def suggest(self, search_key: str) -> list[ProductSuggestion]:
        """Product name suggestions for a partially typed search key."""
        search_key = search_key.strip()
        if not search_key:
            return []
        cursor = (
            self._products.find(
                {"product_name": _contains(search_key)}, {"product_name": 1}
            )
            .sort([("product_sold", -1), ("_id", -1)])
            .limit(SUGGESTION_LIMIT)
        )
        return [ProductSuggestion.model_validate(doc) for doc in cursor]

    def _page(
        self,
        match: dict[str, Any],
        sort: dict[str, int],
        page: int,
        price_range: dict[str, float] | None = None,
    ) -> ProductPage:
        pipeline: list[dict[str, Any]] = [{"$match": match}, _with_price()]
        if price_range:
            pipeline.append({"$match": {"price": price_range}})
        pipeline.append({"$sort": {**sort, "_id": -1}})
        pipeline.append(
            {
                "$facet": {
                    "items": [
                        {"$skip": (page - 1) * SEARCH_PAGE_SIZE},
                        {"$limit": SEARCH_PAGE_SIZE},
                        {"$project": SUMMARY_PROJECTION},
                    ],
                    "total": [{"$count": "count"}],
                }
            }
        )

        result = next(iter(self._products.aggregate(pipeline)), None) or {}
        total_rows = result.get("total") or []
        total = total_rows[0]["count"] if total_rows else 0
        return ProductPage(
            products=[
                ProductSummary.model_validate(doc) for doc in result.get("items", [])
            ],
            pagination=Pagination(
                page=page,
                limit=SEARCH_PAGE_SIZE,
                total=total,
                total_pages=math.ceil(total / SEARCH_PAGE_SIZE) if total else 0,
            ),
        )

    def search(
        self,
        search_key: str = "",
        category: str | None = None,
        sort: SearchSort = SearchSort.newest,
        min_price: float | None = None,
        max_price: float | None = None,
        rating: float | None = None,
        discount: bool = False,
        page: int = 1,
    ) -> ProductPage:
        """Filtered, sorted and paginated product search.

        Price bounds apply to the cheapest variant's price.
        """
        match: dict[str, Any] = {}
        if search_key.strip():
            match["product_name"] = _contains(search_key.strip())
        if category:
            match["product_category"] = parse_object_id(category, "Invalid category ID")
        if rating is not None:
            match["product_rating"] = {"$gte": rating}
        if discount:
            match["product_discount"] = {"$gt": 0}

        price_range: dict[str, float] = {}
        if min_price is not None:
            price_range["$gte"] = min_price
        if max_price is not None:
            price_range["$lte"] = max_price

        return self._page(match, SEARCH_SORTS[sort], page, price_range)

    def _get_category(self, category_id: str) -> Category:
        oid = parse_object_id(category_id, "Invalid category ID")
        category = Category.from_mongo(self._categories.find_one({"_id": oid}))
        if category is None:
            raise CategoryNotFoundError()
        return category

    def by_category(self, category_id: str, page: int = 1) -> CategoryProductPage:
        category = self._get_category(category_id)
        result = self._page({"product_category": category.id}, {"createdAt": -1}, page)
        return CategoryProductPage(
            category=CategoryRead(
                id=str(category.id), category_name=category.category_name
            ),
            products=result.products,
            pagination=result.pagination,
        )

    def resolve_cart(self, items: list[CartItemRef]) -> list[CartItemRead]:
        """Resolve product/variant id pairs into current display data.

        Entries whose product or variant no longer exists are left out.

        Raises:
            InvalidObjectIdError: If any id is malformed
        """
        refs = [
            (
                parse_object_id(item.product_id, "Invalid product ID"),
                parse_object_id(item.variant_id, "Invalid variant ID"),
            )
            for item in items
        ]
        product_ids = list({product_id for product_id, _ in refs})
        products: dict[ObjectId, Product] = {}
        for doc in self._products.find({"_id": {"$in": product_ids}}):
            product = Product.from_mongo(doc)
            products[product.id] = product

        resolved = []
        for product_id, variant_id in refs:
            product = products.get(product_id)
            variant = None
            if product is not None:
                variant = next(
                    (v for v in product.product_variants if v.id == variant_id), None
                )
            if variant is None:
                logger.debug("Cart item %s/%s no longer exists", product_id, variant_id)
                continue
            resolved.append(
                CartItemRead(
                    product_id=str(product.id),
                    variant_id=str(variant.id),
                    product_name=product.product_name,
                    product_img=(
                        product.product_imgs[0] if product.product_imgs else None
                    ),
                    variant_name=variant.variant_name,
                    variant_img=variant.variant_img,
                    variant_price=variant.variant_price,
                    variant_stock=variant.variant_stock,
                    product_discount=product.product_discount,
                )
            )
        return resolved

    def grouped_by_category(self) -> list[CategoryProducts]:
        """Every category with its newest products."""
        return self._categories_with(
            [{"$sort": {"createdAt": -1, "_id": -1}}, {"$limit": SHELF_SIZE}]
        )

    def categories_with_random_products(self) -> list[CategoryProducts]:
        """Every category with a random sample of its products."""
        return self._categories_with([{"$sample": {"size": CATEGORY_SAMPLE_SIZE}}])

    def _categories_with(
        self, product_stages: list[dict[str, Any]]
    ) -> list[CategoryProducts]:
        pipeline = [
            {"$sort": {"category_name": 1}},
            {
                "$lookup": {
                    "from": Collections.PRODUCTS,
                    "let": {"category_id": "$_id"},
                    "pipeline": [
                        {
                            "$match": {
                                "$expr": {"$eq": ["$product_category", "$$category_id"]}
                            }
                        },
                        *product_stages,
                        {"$project": SUMMARY_PROJECTION},
                    ],
                    "as": "products",
                }
            },
        ]
        return [
            CategoryProducts.model_validate(doc)
            for doc in self._categories.aggregate(pipeline)
        ]
