"""
Route tests using Flask's test client.

The app is built with TestingConfig, the mock ERP client and no background
thread; stock and customers are loaded explicitly in the fixture.
"""

import pytest

from app import create_app
from core.exceptions import ERPUnavailableError
from modules.id_generator import SequentialIdGenerator


PASSWORD = "test-password"


@pytest.fixture
def app(tmp_path, mock_erp_client):
    app = create_app(
        "config.TestingConfig",
        test_config={"PENDING_ORDERS_FILE": str(tmp_path / "pending.json")},
        erp_client=mock_erp_client,
        id_generator=SequentialIdGenerator("r-"),
        start_background=False,
    )
    app.config["STOCK_SERVICE"].force_refresh()
    app.config["ORDER_SERVICE"].load_customers()
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    response = client.post("/login", json={"password": PASSWORD})
    assert response.status_code == 200
    return client


class TestAuth:

    def test_api_requires_login(self, client):
        assert client.get("/api/stock").status_code == 401
        assert client.post("/api/parse", json={"text": "1ST20"}).status_code == 401
        assert client.get("/api/orders").status_code == 401

    def test_wrong_password(self, client):
        response = client.post("/login", json={"password": "nope"})
        assert response.status_code == 401
        assert client.get("/api/stock").status_code == 401

    def test_logout(self, auth_client):
        assert auth_client.get("/api/stock").status_code == 200
        auth_client.post("/logout")
        assert auth_client.get("/api/stock").status_code == 401

    def test_health_is_public(self, client):
        data = client.get("/health").get_json()
        assert data["status"] == "ok"
        assert data["stock_loaded"] is True
        assert data["stock_refresh_running"] is False
        assert data["pending_orders"] == 0


class TestStockAndCustomers:

    def test_stock(self, auth_client):
        data = auth_client.get("/api/stock").get_json()
        assert [item["code"] for item in data["products"]["Stout"]] == ["ST20", "ST30", "ST75"]
        assert data["is_stale"] is False

    def test_customers(self, auth_client):
        data = auth_client.get("/api/customers").get_json()
        assert data["customers"] == [
            {"id": 1, "name": "The Crown"},
            {"id": 2, "name": "Red Lion"},
        ]

    def test_customers_refresh_erp_down(self, auth_client, mock_erp_client):
        mock_erp_client.fetch_customers.side_effect = ERPUnavailableError("down")
        response = auth_client.get("/api/customers?refresh=1")
        assert response.status_code == 503
        assert response.get_json()["error"] == "ERPUnavailableError"


class TestParse:

    def test_parse_preview(self, auth_client):
        data = auth_client.post("/api/parse", json={"text": "2ST20, 3NM75, 5ZZZ"}).get_json()
        assert [line["code"] for line in data["lines"]] == ["DEPOSIT", "ST20", "NM75"]
        assert data["text"] == "2ST20, 3NM75"

    def test_parse_strips_markup(self, auth_client):
        data = auth_client.post("/api/parse", json={"text": "<b>2ST20</b>"}).get_json()
        assert data["text"] == "2ST20"

    def test_parse_without_body(self, auth_client):
        data = auth_client.post("/api/parse").get_json()
        assert data["lines"] == []

    def test_long_text_is_cut_at_a_comma(self, auth_client, app):
        app.config["MAX_ORDER_TEXT_LENGTH"] = 10

        data = auth_client.post("/api/parse", json={"text": "2ST20, 10ST20"}).get_json()
        assert data["text"] == "2ST20"

        data = auth_client.post("/api/parse", json={"text": "10ST20ST20ST20"}).get_json()
        assert data["lines"] == []


class TestOrders:

    def test_create_list_delete(self, auth_client, app):
        response = auth_client.post("/api/orders", json={"customer": "The Crown", "text": "2ST20"})
        assert response.status_code == 201
        created = response.get_json()
        assert created["order"]["local_id"] == "r-1"
        assert created["order"]["text"] == "2ST20"
        assert created["oversold"] == []

        listed = auth_client.get("/api/orders").get_json()["orders"]
        assert [order["local_id"] for order in listed] == ["r-1"]

        stock = app.config["STOCK_SERVICE"].get_snapshot()
        assert stock.get_item("Stout", "ST20").available_quantity == 8

        assert auth_client.delete("/api/orders/r-1").status_code == 200
        assert auth_client.get("/api/orders").get_json()["orders"] == []
        stock = app.config["STOCK_SERVICE"].get_snapshot()
        assert stock.get_item("Stout", "ST20").available_quantity == 10

    def test_create_reports_oversell(self, auth_client):
        data = auth_client.post("/api/orders", json={"customer": "Red Lion", "text": "7PA20"}).get_json()
        assert [item["code"] for item in data["oversold"]] == ["PA20"]

    def test_unknown_customer(self, auth_client):
        response = auth_client.post("/api/orders", json={"customer": "Nobody", "text": "2ST20"})
        assert response.status_code == 404
        assert response.get_json()["error"] == "UnknownCustomerError"

    def test_empty_order(self, auth_client):
        response = auth_client.post("/api/orders", json={"customer": "The Crown", "text": "zzz"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "EmptyOrderError"

    def test_delete_unknown(self, auth_client):
        response = auth_client.delete("/api/orders/missing")
        assert response.status_code == 404
        assert response.get_json()["error"] == "OrderNotFoundError"

    def test_reopen(self, auth_client):
        auth_client.post("/api/orders", json={"customer": "Red Lion", "text": "1ST30, 2NM33"})

        data = auth_client.post("/api/orders/r-1/reopen").get_json()

        assert data == {"customer": {"id": 2, "name": "Red Lion"}, "text": "1ST30, 2NM33"}
        assert auth_client.get("/api/orders").get_json()["orders"] == []

    def test_sync(self, auth_client, mock_erp_client):
        auth_client.post("/api/orders", json={"customer": "The Crown", "text": "1ST75"})

        data = auth_client.post("/api/sync").get_json()

        assert data["synced"] == [{"local_id": "r-1", "remote_id": 1001}]
        assert data["failed"] == {}
        mock_erp_client.submit_order.assert_called_once()
        assert auth_client.get("/api/orders").get_json()["orders"] == []


class TestErrors:

    def test_unknown_route(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.get_json()["error"] == "NotFound"
