"""Tests for order domain router."""

from unittest.mock import MagicMock

from bson import ObjectId
from fastapi.testclient import TestClient

from cocoon.core.responses import Pagination
from cocoon.main import app
from cocoon.order.exceptions import OrderNotCancelableError, OrderNotFoundError
from cocoon.order.models import OrderStatus
from cocoon.order.pipeline import SortDirection
from cocoon.order.router import get_order_service
from cocoon.order.schemas import OrderPage, OrderRead, OrderStatusRead
from cocoon.order.service import OrderService


def make_order(**overrides) -> OrderRead:
    data = {
        "_id": str(ObjectId()),
        "order_id": "K3J9Q2.1700000000",
        "user_id": str(ObjectId()),
        "order_buyer": {"name": "Lan", "phone_number": "0912345678"},
        "order_products": [
            {
                "product_id": str(ObjectId()),
                "variant_id": str(ObjectId()),
                "quantity": 1,
                "unit_price": 10.0,
                "product_name": "Soap",
            }
        ],
        "payment_method": "cod",
        "order_status": "unpaid",
    }
    data.update(overrides)
    return OrderRead.model_validate(data)


def override_orders(mock_service: MagicMock) -> None:
    app.dependency_overrides[get_order_service] = lambda: mock_service


class TestListOrders:
    def test_returns_envelope(self, client: TestClient, test_user):
        mock_service = MagicMock(spec=OrderService)
        order = make_order()
        mock_service.list_orders.return_value = OrderPage(
            orders=[order],
            pagination=Pagination(page=1, limit=10, total=1, total_pages=1),
        )
        override_orders(mock_service)

        response = client.get("/orders")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 1,
            "total_pages": 1,
        }
        assert body["data"]["orders"][0]["_id"] == order.id
        assert body["data"]["orders"][0]["order_products"][0]["product_name"] == "Soap"

        query = mock_service.list_orders.call_args.args[0]
        assert query.owner_id == test_user.id

    def test_query_parameters(self, client: TestClient):
        mock_service = MagicMock(spec=OrderService)
        mock_service.list_orders.return_value = OrderPage(
            orders=[], pagination=Pagination(page=2, limit=5, total=0, total_pages=0)
        )
        override_orders(mock_service)

        response = client.get(
            "/orders",
            params={
                "status": "delivering",
                "sort": "final_cost",
                "order": "asc",
                "page": "2",
                "limit": "5",
                "product_name": " lot ",
                "order_id": "65f",
            },
        )

        assert response.status_code == 200
        query = mock_service.list_orders.call_args.args[0]
        assert query.status == OrderStatus.delivering
        assert query.product_name == "lot"
        assert query.order_id_fragment == "65f"
        assert query.phone_number is None
        assert query.page.page == 2
        assert query.page.page_size == 5
        assert query.page.sort_field == "final_cost"
        assert query.page.sort_direction is SortDirection.asc

    def test_lenient_paging_values(self, client: TestClient):
        mock_service = MagicMock(spec=OrderService)
        mock_service.list_orders.return_value = OrderPage(
            orders=[], pagination=Pagination(page=1, limit=10, total=0, total_pages=0)
        )
        override_orders(mock_service)

        response = client.get("/orders", params={"page": "x", "limit": "0"})

        assert response.status_code == 200
        query = mock_service.list_orders.call_args.args[0]
        assert (query.page.page, query.page.page_size) == (1, 10)

    def test_invalid_status(self, client: TestClient):
        override_orders(MagicMock(spec=OrderService))

        response = client.get("/orders", params={"status": "lost"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["type"] == "validation_error"

    def test_requires_authentication(self, unauthenticated_client: TestClient):
        override_orders(MagicMock(spec=OrderService))

        response = unauthenticated_client.get("/orders")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "type": "not_authenticated",
            "message": "Not authenticated",
        }


class TestTrack:
    def test_public(self, unauthenticated_client: TestClient):
        mock_service = MagicMock(spec=OrderService)
        mock_service.track.return_value = [make_order()]
        override_orders(mock_service)

        response = unauthenticated_client.get(
            "/orders/track",
            params={"order_id": "K3J9Q2", "phone_number": "0912345678"},
        )

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1
        mock_service.track.assert_called_once_with("K3J9Q2", "0912345678")

    def test_not_found(self, unauthenticated_client: TestClient):
        mock_service = MagicMock(spec=OrderService)
        mock_service.track.side_effect = OrderNotFoundError()
        override_orders(mock_service)

        response = unauthenticated_client.get(
            "/orders/track",
            params={"order_id": "K3J9Q2", "phone_number": "0999999999"},
        )

        assert response.status_code == 404
        assert response.json()["type"] == "order_not_found"

    def test_route_is_not_taken_for_an_order_id(self, client: TestClient):
        mock_service = MagicMock(spec=OrderService)
        mock_service.track.return_value = [make_order()]
        override_orders(mock_service)

        client.get(
            "/orders/track", params={"order_id": "A", "phone_number": "0912345678"}
        )

        mock_service.get_order.assert_not_called()


class TestGetOrder:
    def test_by_internal_id(self, client: TestClient, test_user):
        mock_service = MagicMock(spec=OrderService)
        order = make_order()
        mock_service.get_order.return_value = order
        override_orders(mock_service)

        response = client.get(f"/orders/{order.id}")

        assert response.status_code == 200
        assert response.json()["data"]["order_id"] == order.order_id
        mock_service.get_order.assert_called_once_with(test_user.id, order.id)

    def test_by_code(self, unauthenticated_client: TestClient):
        mock_service = MagicMock(spec=OrderService)
        mock_service.get_by_code.return_value = make_order(order_id="ABC.1")
        override_orders(mock_service)

        response = unauthenticated_client.get("/orders/getOrder/ABC.1")

        assert response.status_code == 200
        assert response.json()["data"]["order_id"] == "ABC.1"


class TestCancel:
    def test_cancel(self, client: TestClient, test_user):
        mock_service = MagicMock(spec=OrderService)
        order_id = str(ObjectId())
        mock_service.cancel.return_value = OrderStatusRead(
            id=order_id, order_id="A.1", order_status=OrderStatus.canceled
        )
        override_orders(mock_service)

        response = client.put(f"/orders/cancel/{order_id}")

        assert response.status_code == 200
        assert response.json()["data"]["order_status"] == "canceled"
        mock_service.cancel.assert_called_once_with(test_user.id, order_id)

    def test_delivered_conflict(self, client: TestClient):
        mock_service = MagicMock(spec=OrderService)
        mock_service.cancel.side_effect = OrderNotCancelableError()
        override_orders(mock_service)

        response = client.put(f"/orders/cancel/{ObjectId()}")

        assert response.status_code == 409
        assert response.json()["type"] == "order_not_cancelable"
