from conftest import INTERNAL_HEADERS

USER = "user-1"

SHIPPING = {
    "name": "Ada Lovelace",
    "street": "12 Analytical Row",
    "city": "London",
    "state": "LDN",
    "zip_code": "N1 9GU",
    "country": "UK",
}


def checkout_body(simulate_success=True):
    return {
        "shipping_address": SHIPPING,
        "payment_details": {"method": "card", "simulate_success": simulate_success},
    }


class TestProductEndpoints:
    async def test_create_requires_internal_key(self, client):
        response = await client.post("/products/", json={"name": "Mug", "price": "9.99"})

        assert response.status_code == 403

    async def test_create_and_read(self, client):
        response = await client.post(
            "/products/",
            json={"name": "Mug", "price": "9.99", "stock": 4, "category_id": 2, "brand_id": 5},
            headers=INTERNAL_HEADERS,
        )
        assert response.status_code == 201
        product_id = response.json()["id"]

        response = await client.get(f"/products/{product_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Mug"

        response = await client.get("/products/category/2")
        assert [p["id"] for p in response.json()] == [product_id]

    async def test_unknown_product(self, client):
        response = await client.get("/products/4242")

        assert response.status_code == 404
        assert response.json() == {"detail": "Product with ID 4242 not found", "error": "not_found"}


class TestInventoryEndpoints:
    async def test_status(self, client, make_product):
        product = await make_product(stock=3)

        response = await client.get(f"/inventory/{product.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["current_stock"] == 3
        assert body["status"] == "low_stock"

    async def test_adjust_and_audit(self, client, make_product):
        product = await make_product(stock=3)

        response = await client.patch(
            f"/inventory/{product.id}/adjust",
            json={"adjustment": 7, "reason": "Supplier delivery"},
            headers=INTERNAL_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["new_stock"] == 10

        response = await client.get(f"/inventory/{product.id}/audit")
        assert [e["reason"] for e in response.json()] == ["Supplier delivery"]

    async def test_adjust_below_zero(self, client, make_product):
        product = await make_product(stock=3)

        response = await client.post(
            f"/inventory/{product.id}/decrement", json={"quantity": 4}, headers=INTERNAL_HEADERS
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_stock"

    async def test_adjust_requires_internal_key(self, client, make_product):
        product = await make_product(stock=3)

        response = await client.patch(f"/inventory/{product.id}/adjust", json={"adjustment": 1})

        assert response.status_code == 403

    async def test_batch(self, client, make_product):
        a = await make_product(name="A", stock=5)
        b = await make_product(name="B", stock=5)

        response = await client.post(
            "/inventory/batch",
            json={"items": [
                {"product_id": a.id, "quantity": -2},
                {"product_id": b.id, "quantity": 3},
            ]},
            headers=INTERNAL_HEADERS,
        )

        assert response.status_code == 200
        assert [e["new_stock"] for e in response.json()] == [3, 8]

    async def test_bad_paging(self, client, make_product):
        product = await make_product()

        response = await client.get(f"/inventory/{product.id}/audit", params={"limit": 500})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestCartEndpoints:
    async def test_add_update_remove(self, client, make_product):
        product = await make_product(price="19.99", stock=10)

        response = await client.post(
            "/cart/items", params={"cart_id": "c1"}, json={"product_id": product.id, "quantity": 2}
        )
        assert response.status_code == 201
        assert response.json()["subtotal"] == "39.98"

        response = await client.patch(f"/cart/items/{product.id}", params={"cart_id": "c1"}, json={"quantity": 1})
        assert response.json()["item_count"] == 1

        response = await client.delete(f"/cart/items/{product.id}", params={"cart_id": "c1"})
        assert response.json()["items"] == []

    async def test_invalid_quantity(self, client, make_product):
        product = await make_product()

        response = await client.post("/cart/items", json={"product_id": product.id, "quantity": 0})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid quantity", "error": "validation_error"}


class TestCheckoutAndOrders:
    async def test_requires_token(self, client):
        response = await client.post("/checkout/", json=checkout_body())

        assert response.status_code == 401

    async def test_checkout_then_manage_order(self, client, make_product, auth_headers):
        product = await make_product(name="Mug", price="19.99", stock=5)
        await client.post("/cart/items", params={"cart_id": USER}, json={"product_id": product.id, "quantity": 2})

        response = await client.post("/checkout/", json=checkout_body(), headers=auth_headers(USER))
        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert order["total"] == "53.18"
        assert order["shipping_address"]["city"] == "London"

        response = await client.get("/orders/", headers=auth_headers(USER))
        assert [o["order_id"] for o in response.json()] == [order["order_id"]]

        response = await client.get(f"/orders/{order['order_id']}", headers=auth_headers("user-2"))
        assert response.status_code == 403
        assert response.json()["error"] == "unauthorized"

        response = await client.patch(f"/orders/{order['order_id']}/cancel", headers=auth_headers(USER))
        assert response.json()["status"] == "cancelled"

        response = await client.patch(f"/orders/{order['order_id']}/complete", headers=auth_headers(USER))
        assert response.status_code == 400
        assert response.json() == {"detail": "Order is already cancelled", "error": "conflict"}

        response = await client.get(f"/inventory/{product.id}")
        assert response.json()["current_stock"] == 5

    async def test_empty_cart(self, client, auth_headers):
        response = await client.post("/checkout/", json=checkout_body(), headers=auth_headers(USER))

        assert response.status_code == 400
        assert response.json()["error"] == "cart_empty"

    async def test_declined_payment(self, client, make_product, auth_headers):
        product = await make_product(stock=5)
        await client.post("/cart/items", params={"cart_id": USER}, json={"product_id": product.id, "quantity": 1})

        response = await client.post(
            "/checkout/", json=checkout_body(simulate_success=False), headers=auth_headers(USER)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "payment_failed"
        assert (await client.get("/cart/", params={"cart_id": USER})).json()["item_count"] == 1
