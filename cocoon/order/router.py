"""Order domain router.

Customer endpoints need a bearer token and only see the caller's orders.
Tracking and lookup by order code are open to guests.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from cocoon.auth.dependencies import CurrentUserDep
from cocoon.core.constants import CommonResponses, Routes
from cocoon.core.deps import DatabaseDep
from cocoon.core.responses import Envelope, ok
from cocoon.order.models import OrderStatus
from cocoon.order.pipeline import OrderQuery, PageRequest, SortDirection
from cocoon.order.schemas import OrderPage, OrderRead, OrderStatusRead
from cocoon.order.service import OrderService


def get_order_service(db: DatabaseDep) -> OrderService:
    return OrderService(db)


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]

router = APIRouter(
    prefix=Routes.ORDERS.prefix,
    tags=[Routes.ORDERS.tag],
    responses={**CommonResponses.BAD_REQUEST, **CommonResponses.NOT_FOUND},
)


@router.get(
    "",
    response_model=Envelope[OrderPage],
    responses={**CommonResponses.UNAUTHORIZED},
)
async def list_orders(
    user: CurrentUserDep,
    orders: OrderServiceDep,
    status: OrderStatus | None = None,
    sort: str = "createdAt",
    order: SortDirection = SortDirection.desc,
    page: str | None = None,
    limit: str | None = None,
    product_name: str = "",
    order_id: str = "",
    phone_number: str = "",
):
    """List the current user's orders, newest first by default.

    ``order_id`` matches any part of the internal id and ``product_name``
    any part of a line item's product name, both case-insensitively.
    """
    query = OrderQuery(
        owner_id=user.id,
        status=status,
        order_id_fragment=order_id.strip() or None,
        phone_number=phone_number.strip() or None,
        product_name=product_name.strip() or None,
        page=PageRequest.coerce(
            page=page, page_size=limit, sort_field=sort, sort_direction=order
        ),
    )
    return ok(orders.list_orders(query))


@router.get("/track", response_model=Envelope[list[OrderRead]])
async def track_order(
    orders: OrderServiceDep,
    order_id: str = Query(default=""),
    phone_number: str = Query(default=""),
):
    """Track orders by order code prefix and the buyer's phone number."""
    return ok(orders.track(order_id, phone_number))


@router.get("/getOrder/{order_code}", response_model=Envelope[OrderRead])
async def get_order_by_code(order_code: str, orders: OrderServiceDep):
    """Get an order by its order code."""
    return ok(orders.get_by_code(order_code))


@router.put(
    "/cancel/{order_id}",
    response_model=Envelope[OrderStatusRead],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.CONFLICT},
)
async def cancel_order(order_id: str, user: CurrentUserDep, orders: OrderServiceDep):
    """Cancel an unpaid or delivering order."""
    return ok(orders.cancel(user.id, order_id))


@router.get(
    "/{order_id}",
    response_model=Envelope[OrderRead],
    responses={**CommonResponses.UNAUTHORIZED},
)
async def get_order(order_id: str, user: CurrentUserDep, orders: OrderServiceDep):
    """Get one of the current user's orders by internal id."""
    return ok(orders.get_order(user.id, order_id))
