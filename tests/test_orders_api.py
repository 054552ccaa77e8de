"""Order placement and history via TestClient."""

from decimal import Decimal

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from pizzago.services import cart_engine
from pizzago.services.catalog import CatalogService
from pizzago.services.order_service import OrderService
from pizzago.services.session_store import SessionStore


@pytest.fixture()
def pizza(make_pizza):
    return make_pizza(name="Margherita", price="10.00")


def _fill_cart(client, pizza_id, quantity=2):
    response = client.post("/api/v1/cart", json={"pizzaId": pizza_id, "quantity": quantity})
    assert response.status_code == 200


class TestPlaceOrder:
    def test_commit_prices_and_clears_cart(self, client, pizza):
        _fill_cart(client, pizza, 2)

        response = client.post("/api/v1/orders")

        assert response.status_code == 201
        body = response.json()
        assert body["total"] == 20
        assert body["orderId"] > 0
        assert "createdAt" in body
        assert body["items"] == [
            {"pizzaId": pizza, "name": "Margherita", "quantity": 2, "unitPrice": 10, "totalPrice": 20}
        ]
        assert client.get("/api/v1/cart").json() == {"items": [], "total": 0}

    def test_empty_cart(self, client):
        response = client.post("/api/v1/orders")
        assert response.status_code == 400
        assert "Cart is empty" in response.json()["error"]

    def test_prices_come_from_catalog_not_cart(self, client, pizza, set_price):
        _fill_cart(client, pizza, 2)
        set_price(pizza, "11.50")

        body = client.post("/api/v1/orders").json()

        assert body["total"] == 23
        assert body["items"][0]["unitPrice"] == 11.5

    def test_unavailable_item_fails_whole_commit(self, client, pizza, make_pizza, delete_pizza):
        other = make_pizza(name="Seasonal", price="9.00")
        _fill_cart(client, pizza, 1)
        _fill_cart(client, other, 1)
        delete_pizza(other)

        response = client.post("/api/v1/orders")

        assert response.status_code == 404
        assert f"Pizza with ID {other} not found" in response.json()["error"]
        assert client.get("/api/v1/orders").json() == {"orders": []}
        assert len(client.get("/api/v1/cart").json()["items"]) == 2

    def test_second_order_needs_new_items(self, client, pizza):
        _fill_cart(client, pizza)
        assert client.post("/api/v1/orders").status_code == 201
        assert client.post("/api/v1/orders").status_code == 400

    def test_cart_kept_when_clearing_fails(self, client, pizza, monkeypatch):
        _fill_cart(client, pizza, 2)

        def store_down(*args, **kwargs):
            raise RedisConnectionError("connection refused")

        monkeypatch.setattr(SessionStore, "compare_and_set", store_down)
        response = client.post("/api/v1/orders")
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        # the order exists, the cart was not cleared
        assert len(client.get("/api/v1/orders").json()["orders"]) == 1
        assert client.get("/api/v1/cart").json()["total"] == 20

    def test_line_added_during_commit_stays_in_cart(self, session_factory, sessions, make_pizza):
        margherita = make_pizza(name="Margherita", price="10.00")
        diavola = make_pizza(name="Diavola", price="12.00")
        session, _ = sessions.resolve(None)
        sessions.mutate(session, lambda s: cart_engine.add(s.cart, margherita, 2, Decimal("10.00")))
        stale = sessions.load(session.id)
        # a second request for the same session lands between pricing and clearing
        sessions.mutate(
            sessions.load(session.id), lambda s: cart_engine.add(s.cart, diavola, 1, Decimal("12.00"))
        )

        db = session_factory()
        try:
            result = OrderService(db, sessions, CatalogService(db)).place_order(stale)
        finally:
            db.close()

        assert [(i["pizza_id"], i["quantity"]) for i in result["items"]] == [(margherita, 2)]
        assert result["total"] == Decimal("20.00")
        cart = sessions.load(session.id).cart
        assert [(l.pizza_id, l.quantity) for l in cart.items] == [(diavola, 1)]
        assert cart.total == Decimal("12.00")


class TestOrderHistory:
    def test_list_most_recent_first(self, client, pizza, make_pizza):
        other = make_pizza(name="Diavola", price="12.00")
        _fill_cart(client, pizza, 1)
        first = client.post("/api/v1/orders").json()["orderId"]
        _fill_cart(client, other, 1)
        second = client.post("/api/v1/orders").json()["orderId"]

        orders = client.get("/api/v1/orders").json()["orders"]

        assert [o["orderId"] for o in orders] == [second, first]
        assert orders[0]["status"] == "pending"
        assert orders[0]["total"] == 12
        assert orders[0]["items"][0]["pizzaId"] == other

    def test_fresh_session_has_no_orders(self, client):
        assert client.get("/api/v1/orders").json() == {"orders": []}

    def test_order_detail(self, client, pizza):
        _fill_cart(client, pizza, 3)
        order_id = client.post("/api/v1/orders").json()["orderId"]

        response = client.get(f"/api/v1/orders/{order_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["orderId"] == order_id
        assert body["status"] == "pending"
        assert body["total"] == 30
        assert body["items"] == [
            {"pizzaId": pizza, "name": "Margherita", "quantity": 3, "unitPrice": 10, "totalPrice": 30}
        ]

    def test_order_is_immutable_after_price_change(self, client, pizza, set_price):
        _fill_cart(client, pizza, 2)
        order_id = client.post("/api/v1/orders").json()["orderId"]
        before = client.get(f"/api/v1/orders/{order_id}").json()

        set_price(pizza, "99.00")

        after = client.get(f"/api/v1/orders/{order_id}").json()
        assert after["items"] == before["items"]
        assert after["total"] == before["total"] == 20

    def test_invalid_id(self, client):
        response = client.get("/api/v1/orders/abc")
        assert response.status_code == 400
        assert "Invalid order ID" in response.json()["error"]

    @pytest.mark.parametrize("order_id", ["12345", "0", "-1"])
    def test_unknown_id(self, client, order_id):
        response = client.get(f"/api/v1/orders/{order_id}")
        assert response.status_code == 404
        assert "Order not found" in response.json()["error"]

    def test_other_sessions_orders_are_hidden(self, client, pizza):
        _fill_cart(client, pizza)
        order_id = client.post("/api/v1/orders").json()["orderId"]

        client.cookies.clear()

        assert client.get(f"/api/v1/orders/{order_id}").status_code == 404
        assert client.get("/api/v1/orders").json() == {"orders": []}
