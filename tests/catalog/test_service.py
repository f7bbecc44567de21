"""Tests for cocoon/catalog/service.py - storefront product queries."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from cocoon.catalog.exceptions import CategoryNotFoundError
from cocoon.catalog.schemas import CartItemRef, SearchSort
from cocoon.catalog.service import SEARCH_PAGE_SIZE, SHELF_SIZE, CatalogService
from cocoon.core.exceptions import InvalidObjectIdError
from cocoon.db.mongo import Collections

SOAPS = ObjectId()


def summary_doc(name="Lavender soap", **overrides):
    doc = {
        "_id": ObjectId(),
        "product_name": name,
        "product_img": "soap.png",
        "product_category": SOAPS,
        "price": 45.0,
        "product_rating": 4.5,
        "product_discount": 0,
        "product_sold": 12,
        "createdAt": datetime(2024, 5, 1, tzinfo=UTC),
    }
    doc.update(overrides)
    return doc


def make_service(aggregate_result=()):
    db = MagicMock()
    collection = MagicMock()
    collection.aggregate.return_value = iter(aggregate_result)
    db.__getitem__.return_value = collection
    return CatalogService(db), collection


def _pipeline(collection):
    return collection.aggregate.call_args.args[0]


class TestShelves:
    def test_newest(self):
        service, collection = make_service([summary_doc()])

        products = service.newest()

        assert products[0].product_name == "Lavender soap"
        assert products[0].price == 45.0
        pipeline = _pipeline(collection)
        assert pipeline[1] == {"$sort": {"createdAt": -1, "_id": -1}}
        assert pipeline[2] == {"$limit": SHELF_SIZE}
        assert "$project" in pipeline[-1]

    def test_discounted_only_includes_discounts(self):
        service, collection = make_service()

        service.discounted()

        pipeline = _pipeline(collection)
        assert pipeline[0] == {"$match": {"product_discount": {"$gt": 0}}}
        assert pipeline[1]["$sort"]["product_discount"] == -1

    def test_top_rated(self):
        service, collection = make_service()

        service.top_rated()

        assert _pipeline(collection)[1]["$sort"]["product_rating"] == -1


class TestSearch:
    def test_filters_and_pagination(self):
        service, collection = make_service(
            [{"items": [summary_doc()], "total": [{"count": 30}]}]
        )

        page = service.search(
            search_key=" soap ",
            category=str(SOAPS),
            sort=SearchSort.price_asc,
            min_price=10,
            max_price=50,
            rating=4,
            discount=True,
            page=2,
        )

        assert page.pagination.total == 30
        assert page.pagination.total_pages == 3
        assert page.pagination.limit == SEARCH_PAGE_SIZE
        assert len(page.products) == 1

        pipeline = _pipeline(collection)
        assert pipeline[0] == {
            "$match": {
                "product_name": {"$regex": "soap", "$options": "i"},
                "product_category": SOAPS,
                "product_rating": {"$gte": 4},
                "product_discount": {"$gt": 0},
            }
        }
        assert pipeline[2] == {"$match": {"price": {"$gte": 10, "$lte": 50}}}
        assert pipeline[3] == {"$sort": {"price": 1, "_id": -1}}
        items = pipeline[4]["$facet"]["items"]
        assert items[0] == {"$skip": SEARCH_PAGE_SIZE}

    def test_search_key_is_literal(self):
        service, collection = make_service()

        service.search(search_key="a+b (x)")

        match = _pipeline(collection)[0]["$match"]
        assert match["product_name"]["$regex"] == r"a\+b\ \(x\)"

    def test_empty_result(self):
        service, _ = make_service()

        page = service.search()

        assert page.products == []
        assert page.pagination.total == 0
        assert page.pagination.total_pages == 0

    def test_invalid_category(self):
        service, _ = make_service()

        with pytest.raises(InvalidObjectIdError):
            service.search(category="soaps")


class TestByCategory:
    def test_returns_category_and_products(self):
        service, collection = make_service(
            [{"items": [summary_doc()], "total": [{"count": 1}]}]
        )
        collection.find_one.return_value = {"_id": SOAPS, "category_name": "Soaps"}

        page = service.by_category(str(SOAPS))

        assert page.category.id == str(SOAPS)
        assert page.category.category_name == "Soaps"
        assert page.pagination.total == 1
        assert _pipeline(collection)[0] == {"$match": {"product_category": SOAPS}}

    def test_unknown_category(self):
        service, collection = make_service()
        collection.find_one.return_value = None

        with pytest.raises(CategoryNotFoundError) as exc_info:
            service.by_category(str(ObjectId()))

        assert exc_info.value.status_code == 404


def test_categories_with_random_products():
    service, collection = make_service(
        [{"_id": SOAPS, "category_name": "Soaps", "products": [summary_doc()]}]
    )

    categories = service.categories_with_random_products()

    assert categories[0].category_name == "Soaps"
    assert len(categories[0].products) == 1
    lookup = _pipeline(collection)[1]["$lookup"]
    assert lookup["from"] == Collections.PRODUCTS
    assert {"$sample": {"size": 4}} in lookup["pipeline"]


def insert_product(db, name="Lavender soap", sold=0, variants=None):
    product_id = ObjectId()
    db[Collections.PRODUCTS].insert_one(
        {
            "_id": product_id,
            "product_name": name,
            "product_imgs": ["soap.png"],
            "product_category": SOAPS,
            "product_variants": variants
            or [
                {
                    "_id": ObjectId(),
                    "variant_name": "100g",
                    "variant_price": 45.0,
                    "variant_stock": 3,
                }
            ],
            "product_discount": 10,
            "product_sold": sold,
            "createdAt": datetime(2024, 5, 1, tzinfo=UTC),
        }
    )
    return db[Collections.PRODUCTS].find_one({"_id": product_id})


class TestSuggest:
    def test_best_sellers_first(self, db):
        insert_product(db, "Lavender soap", sold=1)
        insert_product(db, "Rose soap", sold=9)
        insert_product(db, "Candle", sold=50)

        suggestions = CatalogService(db).suggest("SOAP")

        assert [s.product_name for s in suggestions] == ["Rose soap", "Lavender soap"]

    def test_limit(self, db):
        for i in range(8):
            insert_product(db, f"Soap {i}")

        assert len(CatalogService(db).suggest("soap")) == 5

    def test_blank_key(self, db):
        insert_product(db)

        assert CatalogService(db).suggest("   ") == []


class TestResolveCart:
    def test_resolves_current_data(self, db):
        product = insert_product(db)
        variant = product["product_variants"][0]

        items = CatalogService(db).resolve_cart(
            [
                CartItemRef(
                    product_id=str(product["_id"]), variant_id=str(variant["_id"])
                )
            ]
        )

        assert len(items) == 1
        assert items[0].product_name == "Lavender soap"
        assert items[0].product_img == "soap.png"
        assert items[0].variant_name == "100g"
        assert items[0].variant_price == 45.0
        assert items[0].variant_stock == 3
        assert items[0].product_discount == 10

    def test_missing_entries_are_dropped(self, db):
        product = insert_product(db)

        items = CatalogService(db).resolve_cart(
            [
                CartItemRef(product_id=str(product["_id"]), variant_id=str(ObjectId())),
                CartItemRef(product_id=str(ObjectId()), variant_id=str(ObjectId())),
            ]
        )

        assert items == []

    def test_malformed_id(self, db):
        with pytest.raises(InvalidObjectIdError):
            CatalogService(db).resolve_cart(
                [CartItemRef(product_id="nope", variant_id=str(ObjectId()))]
            )


def test_grouped_by_category_takes_newest():
    service, collection = make_service([{"_id": SOAPS, "category_name": "Soaps"}])

    categories = service.grouped_by_category()

    assert categories[0].products == []
    stages = _pipeline(collection)[1]["$lookup"]["pipeline"]
    assert stages[1] == {"$sort": {"createdAt": -1, "_id": -1}}
    assert stages[2] == {"$limit": SHELF_SIZE}
