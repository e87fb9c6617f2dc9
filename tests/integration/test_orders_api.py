"""
Integration Tests - Orders API
"""
import pytest


@pytest.fixture
def basket(create_user, create_product):
    """One user and two products priced 10 and 20"""
    user = create_user()
    cheap = create_product(price=10.0)
    pricey = create_product(price=20.0)
    return user, cheap, pricey


class TestCreateOrder:
    """POST /orders"""

    def test_total_includes_vat(self, client, basket):
        user, cheap, pricey = basket

        response = client.post("/orders", json={
            "userId": user["id"], "productIds": [cheap["id"], pricey["id"]],
        })

        assert response.status_code == 201
        body = response.json()
        assert body["total"] == 36.0
        assert body["payment"] is False
        assert body["product_ids"] == [cheap["id"], pricey["id"]]
        assert body["user"]["username"] == user["username"]
        assert "password_hash" not in body["user"]
        assert [p["id"] for p in body["products"]] == [cheap["id"], pricey["id"]]

    def test_duplicate_product_charged_twice(self, client, basket):
        user, cheap, _ = basket

        response = client.post("/orders", json={
            "userId": user["id"], "productIds": [cheap["id"], cheap["id"]],
        })

        assert response.status_code == 201
        assert response.json()["total"] == 24.0

    def test_unknown_user(self, client, basket):
        _, cheap, _ = basket

        response = client.post("/orders", json={"userId": 99, "productIds": [cheap["id"]]})

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_unknown_product(self, client, basket):
        user, cheap, _ = basket

        response = client.post("/orders", json={"userId": user["id"], "productIds": [cheap["id"], 99]})

        assert response.status_code == 404
        assert response.json()["error"] == "One or more products do not exist"

    def test_client_total_is_ignored(self, client, basket):
        user, cheap, _ = basket

        response = client.post("/orders", json={
            "userId": user["id"], "productIds": [cheap["id"]], "total": 1, "payment": True,
        })

        assert response.json()["total"] == 12.0
        assert response.json()["payment"] is False

    def test_invalid_payload(self, client):
        response = client.post("/orders", json={"userId": "1", "productIds": []})

        assert response.status_code == 400
        assert {detail["path"][0] for detail in response.json()["details"]} == {"userId", "productIds"}

    @pytest.mark.parametrize("payload,path", [
        ({"userId": 2**63, "productIds": [1]}, ["userId"]),
        ({"userId": 1, "productIds": [2**64]}, ["productIds", 0]),
    ])
    def test_ids_beyond_key_range(self, client, payload, path):
        response = client.post("/orders", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid data"
        assert response.json()["details"][0]["path"] == path


class TestReadOrders:
    """GET /orders and GET /orders/{id}"""

    def test_list_newest_first(self, client, basket):
        user, cheap, pricey = basket
        client.post("/orders", json={"userId": user["id"], "productIds": [cheap["id"]]})
        client.post("/orders", json={"userId": user["id"], "productIds": [pricey["id"]]})

        body = client.get("/orders").json()

        assert [o["id"] for o in body["orders"]] == [2, 1]
        assert body["orders"][0]["products"][0]["id"] == pricey["id"]
        assert body["pagination"]["total"] == 2

    def test_get(self, client, basket):
        user, cheap, _ = basket
        order = client.post("/orders", json={"userId": user["id"], "productIds": [cheap["id"]]}).json()

        response = client.get(f"/orders/{order['id']}")

        assert response.status_code == 200
        assert response.json()["user"]["id"] == user["id"]

    def test_not_found(self, client):
        response = client.get("/orders/1")

        assert response.status_code == 404
        assert response.json()["error"] == "Order not found"


class TestUpdateOrder:
    """PUT and PATCH /orders/{id}"""

    @pytest.fixture
    def order(self, client, basket):
        user, cheap, _ = basket
        return client.post("/orders", json={"userId": user["id"], "productIds": [cheap["id"]]}).json()

    def test_mark_paid(self, client, order):
        response = client.patch(f"/orders/{order['id']}", json={"payment": True})

        assert response.status_code == 200
        assert response.json()["payment"] is True
        assert response.json()["total"] == order["total"]

    def test_new_products_recompute_total(self, client, order, basket):
        _, _, pricey = basket

        response = client.put(f"/orders/{order['id']}", json={"productIds": [pricey["id"], pricey["id"]]})

        assert response.status_code == 200
        assert response.json()["total"] == 48.0
        assert response.json()["product_ids"] == [pricey["id"], pricey["id"]]

    def test_change_owner(self, client, order, create_user):
        other = create_user()

        response = client.patch(f"/orders/{order['id']}", json={"userId": other["id"]})

        assert response.json()["user"]["id"] == other["id"]

    def test_unknown_owner(self, client, order):
        response = client.patch(f"/orders/{order['id']}", json={"userId": 77})

        assert response.status_code == 404

    def test_unknown_product(self, client, order):
        response = client.patch(f"/orders/{order['id']}", json={"productIds": [77]})

        assert response.status_code == 404
        assert client.get(f"/orders/{order['id']}").json()["total"] == order["total"]

    def test_empty_update(self, client, order):
        response = client.put(f"/orders/{order['id']}", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "No data to update"

    def test_unknown_order(self, client, basket):
        response = client.patch("/orders/50", json={"payment": True})

        assert response.status_code == 404


class TestDeleteOrder:
    """DELETE /orders/{id}"""

    def test_delete(self, client, basket):
        user, cheap, _ = basket
        order = client.post("/orders", json={"userId": user["id"], "productIds": [cheap["id"]]}).json()

        response = client.delete(f"/orders/{order['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Order deleted successfully"
        assert response.json()["order"]["id"] == order["id"]
        assert client.get(f"/orders/{order['id']}").status_code == 404
        assert client.get(f"/users/{user['id']}").status_code == 200

    def test_not_found(self, client):
        assert client.delete("/orders/4").status_code == 404
