"""Catalog domain router.

Guest-facing product listings. Path names follow the storefront client.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from cocoon.catalog.schemas import (
    CartItemRead,
    CategoryProductPage,
    CategoryProducts,
    OrderProductsRequest,
    ProductPage,
    ProductSuggestion,
    ProductSummary,
    SearchSort,
)
from cocoon.catalog.service import CatalogService
from cocoon.core.constants import CommonResponses, Routes
from cocoon.core.deps import DatabaseDep
from cocoon.core.responses import Envelope, ok


def get_catalog_service(db: DatabaseDep) -> CatalogService:
    return CatalogService(db)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]

router = APIRouter(
    prefix=Routes.PRODUCTS.prefix,
    tags=[Routes.PRODUCTS.tag],
    responses={**CommonResponses.BAD_REQUEST},
)


@router.get("/getNewestProducts", response_model=Envelope[list[ProductSummary]])
async def newest_products(catalog: CatalogServiceDep):
    return ok(catalog.newest())


@router.get("/getTopRatedProducts", response_model=Envelope[list[ProductSummary]])
async def top_rated_products(catalog: CatalogServiceDep):
    return ok(catalog.top_rated())


@router.get("/getDiscountProducts", response_model=Envelope[list[ProductSummary]])
async def discount_products(catalog: CatalogServiceDep):
    return ok(catalog.discounted())


@router.get("/searchRecommended", response_model=Envelope[list[ProductSuggestion]])
async def search_recommended(
    catalog: CatalogServiceDep,
    search_key: str = Query(default="", alias="searchKey"),
):
    """Name suggestions while the user is typing."""
    return ok(catalog.suggest(search_key))


@router.get("/search", response_model=Envelope[ProductPage])
async def search(
    catalog: CatalogServiceDep,
    search_key: str = Query(default="", alias="searchKey"),
    category: str | None = None,
    sort: SearchSort = SearchSort.newest,
    min_price: float | None = Query(default=None, alias="minPrice", ge=0),
    max_price: float | None = Query(default=None, alias="maxPrice", ge=0),
    rating: float | None = Query(default=None, ge=0, le=5),
    discount: bool = False,
    page: int = Query(default=1, ge=1),
):
    """Search products by name with optional filters."""
    return ok(
        catalog.search(
            search_key=search_key,
            category=category or None,
            sort=sort,
            min_price=min_price,
            max_price=max_price,
            rating=rating,
            discount=discount,
            page=page,
        )
    )


@router.get(
    "/getProductsByCategory/{category_id}",
    response_model=Envelope[CategoryProductPage],
    responses={**CommonResponses.NOT_FOUND},
)
async def products_by_category(
    category_id: str,
    catalog: CatalogServiceDep,
    page: int = Query(default=1, ge=1),
):
    return ok(catalog.by_category(category_id, page))


@router.post("/getOrderProducts", response_model=Envelope[list[CartItemRead]])
async def order_products(payload: OrderProductsRequest, catalog: CatalogServiceDep):
    """Resolve cart entries into current product and variant display data."""
    return ok(catalog.resolve_cart(payload.items))


@router.get(
    "/getProductsGroupedByCategory",
    response_model=Envelope[list[CategoryProducts]],
)
async def products_grouped_by_category(catalog: CatalogServiceDep):
    return ok(catalog.grouped_by_category())


@router.get("/byCategory", response_model=Envelope[list[CategoryProducts]])
async def categories_with_random_products(catalog: CatalogServiceDep):
    """Categories each with a few randomly chosen products."""
    return ok(catalog.categories_with_random_products())
