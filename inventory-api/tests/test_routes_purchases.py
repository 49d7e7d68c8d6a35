"""HTTP tests for /api/purchases."""

import pytest


@pytest.fixture
async def mouse(make_product):
    return await make_product(unit_price="99.99", available_quantity=50)


async def _buy(client, headers, *items):
    return await client.post(
        "/api/purchases",
        json={"basket": [{"productId": product_id, "quantity": quantity} for product_id, quantity in items]},
        headers=headers,
    )


class TestCreatePurchase:

    async def test_created(self, client, customer, auth_headers, mouse, stock_of):
        response = await _buy(client, auth_headers(customer), (mouse.id, 2))

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Purchase completed successfully"
        data = body["data"]
        assert data["purchaserId"] == customer.id
        assert data["total"] == "199.98"
        assert data["lines"][0]["productId"] == mouse.id
        assert data["lines"][0]["unitPrice"] == "99.99"
        assert data["lines"][0]["subtotal"] == "199.98"
        assert data["lines"][0]["product"] == {
            "id": mouse.id,
            "lotNumber": "LOT-2025-002",
            "name": "Logitech MX Master 3 Mouse",
        }
        assert await stock_of(mouse.id) == 48

    async def test_insufficient_stock(self, client, customer, auth_headers, mouse, ledger_size):
        response = await _buy(client, auth_headers(customer), (mouse.id, 1000))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert body["productId"] == mouse.id
        assert body["available"] == 50
        assert body["requested"] == 1000
        assert "Logitech MX Master 3 Mouse" in body["message"]
        assert await ledger_size() == (0, 0)

    async def test_unknown_product(self, client, customer, auth_headers, mouse, stock_of):
        response = await _buy(client, auth_headers(customer), (mouse.id, 1), (999, 1))

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "PRODUCT_NOT_FOUND"
        assert body["productId"] == 999
        assert await stock_of(mouse.id) == 50

    @pytest.mark.parametrize(
        "payload",
        [
            {"basket": []},
            {"basket": [{"productId": 1, "quantity": 0}]},
            {"basket": [{"productId": 1, "quantity": -3}]},
            {"basket": [{"productId": "abc", "quantity": 1}]},
            {"basket": [{"quantity": 1}]},
            {"basket": [{"productId": 2**70, "quantity": 1}]},
            {"basket": [{"productId": 1, "quantity": 2**70}]},
            {},
        ],
    )
    async def test_malformed_basket_is_rejected(self, client, customer, auth_headers, ledger_size, payload):
        response = await client.post("/api/purchases", json=payload, headers=auth_headers(customer))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation errors"
        assert body["errors"]
        assert all(error["field"].startswith("basket") for error in body["errors"])
        assert await ledger_size() == (0, 0)

    async def test_field_path_points_at_bad_entry(self, client, customer, auth_headers):
        response = await client.post(
            "/api/purchases",
            json={"basket": [{"productId": 1, "quantity": 1}, {"productId": 1, "quantity": 0}]},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "basket.1.quantity"

    async def test_amount_beyond_ledger_range(self, client, customer, auth_headers, make_product, ledger_size):
        bulk = await make_product(unit_price="99999999.99", available_quantity=200_000_000)

        response = await _buy(client, auth_headers(customer), (bulk.id, 100_000_001))

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "PURCHASE_AMOUNT_TOO_LARGE"
        assert body["limit"] == "9999999999999999.99"
        assert await ledger_size() == (0, 0)

    async def test_requires_token(self, client, mouse):
        response = await _buy(client, {}, (mouse.id, 1))

        assert response.status_code == 401
        assert response.json()["message"] == "Token not provided. Access denied."


class TestPurchaseHistoryRoutes:

    async def test_my_purchases(self, client, customer, other_customer, auth_headers, mouse):
        await _buy(client, auth_headers(customer), (mouse.id, 1))
        await _buy(client, auth_headers(customer), (mouse.id, 2))
        await _buy(client, auth_headers(other_customer), (mouse.id, 3))

        response = await client.get("/api/purchases/my-purchases", headers=auth_headers(customer))

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [p["total"] for p in body["data"]] == ["199.98", "99.99"]

    async def test_all_purchases_for_admin(self, client, customer, other_customer, admin, auth_headers, mouse):
        await _buy(client, auth_headers(customer), (mouse.id, 1))
        await _buy(client, auth_headers(other_customer), (mouse.id, 1))

        response = await client.get("/api/purchases/all", headers=auth_headers(admin))

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["data"][0]["customer"]["email"] == "carlos@customer.com"
        assert body["data"][1]["customer"]["email"] == "maria@customer.com"

    async def test_all_purchases_forbidden_for_customer(self, client, customer, auth_headers):
        response = await client.get("/api/purchases/all", headers=auth_headers(customer))

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Administrator role required."


class TestInvoiceRoute:

    async def test_owner_gets_invoice(self, client, customer, auth_headers, mouse):
        created = await _buy(client, auth_headers(customer), (mouse.id, 2))
        purchase_id = created.json()["data"]["id"]

        response = await client.get(f"/api/purchases/invoice/{purchase_id}", headers=auth_headers(customer))

        assert response.status_code == 200
        invoice = response.json()["data"]
        assert invoice["id"] == purchase_id
        assert invoice["customer"] == {"name": "Maria Garcia", "email": "maria@customer.com"}
        assert invoice["lines"] == [
            {
                "productName": "Logitech MX Master 3 Mouse",
                "lotNumber": "LOT-2025-002",
                "quantity": 2,
                "unitPrice": "99.99",
                "subtotal": "199.98",
            }
        ]
        assert invoice["total"] == "199.98"

    async def test_admin_gets_any_invoice(self, client, customer, admin, auth_headers, mouse):
        created = await _buy(client, auth_headers(customer), (mouse.id, 1))
        purchase_id = created.json()["data"]["id"]

        response = await client.get(f"/api/purchases/invoice/{purchase_id}", headers=auth_headers(admin))

        assert response.status_code == 200

    async def test_other_customer_forbidden(self, client, customer, other_customer, auth_headers, mouse):
        created = await _buy(client, auth_headers(customer), (mouse.id, 1))
        purchase_id = created.json()["data"]["id"]

        response = await client.get(f"/api/purchases/invoice/{purchase_id}", headers=auth_headers(other_customer))

        assert response.status_code == 403
        assert response.json()["message"] == "You are not allowed to view this invoice"

    async def test_missing_invoice(self, client, customer, auth_headers):
        response = await client.get("/api/purchases/invoice/999", headers=auth_headers(customer))

        assert response.status_code == 404
        assert response.json()["code"] == "PURCHASE_NOT_FOUND"

    @pytest.mark.parametrize("purchase_id", ["0", "1180591620717411303424"])
    async def test_out_of_range_invoice_id_is_rejected(self, client, customer, auth_headers, purchase_id):
        response = await client.get(f"/api/purchases/invoice/{purchase_id}", headers=auth_headers(customer))

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation errors"
        assert body["errors"][0]["field"] == "path.purchase_id"
