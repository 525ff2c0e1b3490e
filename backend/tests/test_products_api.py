"""
Product Catalog Backend — Products API Integration Tests
==========================================================

What:  End-to-end tests of the /api/products endpoints.
How:   HTTPX AsyncClient over ASGITransport; requests hit a per-test SQLite
       database through aiosqlite (see conftest.py).

What we test:
    ✅ Listing filters (rating, stock, fast delivery, search), sort and pagination
    ✅ Empty catalog returns totalCount 0 and an empty page
    ✅ Ownership rules on GET/PUT/DELETE by id
    ✅ Error statuses and bodies (400 / 401)
"""

import json
import uuid

import pytest


def product_body(**overrides):
    body = {
        "name": "Desk Lamp",
        "price": 25.0,
        "image": "https://img.example.com/lamp.jpg",
        "fastDelivery": True,
        "inStock": 4,
        "rating": 4.2,
    }
    body.update(overrides)
    return body


class TestListProducts:
    """GET /api/products"""

    @pytest.mark.asyncio
    async def test_empty_catalog(self, test_client):
        response = await test_client.get("/api/products")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "products": {"metadata": {"totalCount": 0}, "data": []},
        }
        assert response.headers["X-Total-Count"] == "0"

    @pytest.mark.asyncio
    async def test_listing_is_public(self, test_client, seed_products):
        await seed_products([{"name": "A"}, {"name": "B"}])

        response = await test_client.get("/api/products")

        assert response.status_code == 200
        products = response.json()["products"]
        assert products["metadata"]["totalCount"] == 2
        assert [p["name"] for p in products["data"]] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_by_rating_keeps_rating_at_or_above_threshold(self, test_client, seed_products):
        await seed_products([{"rating": r} for r in (2.0, 3.9, 4.0, 4.5, 5.0)])

        response = await test_client.get("/api/products", params={"byRating": "4"})

        data = response.json()["products"]["data"]
        assert len(data) == 3
        assert all(p["rating"] >= 4 for p in data)
        assert response.json()["products"]["metadata"]["totalCount"] == 3

    @pytest.mark.asyncio
    async def test_by_stock_false_excludes_out_of_stock(self, test_client, seed_products):
        await seed_products([{"in_stock": n} for n in (0, 1, 0, 12)])

        response = await test_client.get("/api/products", params={"byStock": "false"})

        data = response.json()["products"]["data"]
        assert [p["inStock"] for p in data] == [1, 12]

    @pytest.mark.asyncio
    async def test_by_stock_true_includes_out_of_stock(self, test_client, seed_products):
        await seed_products([{"in_stock": n} for n in (0, 1)])

        response = await test_client.get("/api/products", params={"byStock": "true"})

        assert response.json()["products"]["metadata"]["totalCount"] == 2

    @pytest.mark.asyncio
    async def test_by_fast_delivery(self, test_client, seed_products):
        await seed_products([
            {"name": "slow", "fast_delivery": False},
            {"name": "fast", "fast_delivery": True},
        ])

        response = await test_client.get("/api/products", params={"byFastDelivery": "true"})

        data = response.json()["products"]["data"]
        assert [p["name"] for p in data] == ["fast"]
        assert data[0]["fastDelivery"] is True

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_substring(self, test_client, seed_products):
        await seed_products([
            {"name": "Electric Kettle"},
            {"name": "Tea Cup"},
            {"name": "KETTLE descaler"},
        ])

        response = await test_client.get("/api/products", params={"searchQuery": "kettle"})

        names = sorted(p["name"] for p in response.json()["products"]["data"])
        assert names == ["Electric Kettle", "KETTLE descaler"]

    @pytest.mark.asyncio
    async def test_search_whitespace_is_part_of_the_term(self, test_client, seed_products):
        await seed_products([{"name": "Teapot"}, {"name": "Tea Cup"}])

        response = await test_client.get("/api/products", params={"searchQuery": "Tea "})

        assert [p["name"] for p in response.json()["products"]["data"]] == ["Tea Cup"]

    @pytest.mark.asyncio
    async def test_sort_by_price(self, test_client, seed_products):
        await seed_products([{"price": p} for p in (30.0, 10.0, 20.0)])

        ascending = await test_client.get("/api/products", params={"sort": "lowtohigh"})
        descending = await test_client.get("/api/products", params={"sort": "hightolow"})

        assert [p["price"] for p in ascending.json()["products"]["data"]] == [10.0, 20.0, 30.0]
        assert [p["price"] for p in descending.json()["products"]["data"]] == [30.0, 20.0, 10.0]

    @pytest.mark.asyncio
    async def test_second_page_of_sorted_set(self, test_client, seed_products):
        await seed_products([
            {"name": f"P{price}", "price": price} for price in (50.0, 10.0, 40.0, 20.0, 30.0)
        ])

        response = await test_client.get(
            "/api/products",
            params={"sort": "lowtohigh", "itemsPerPage": "2", "pageNum": "1"},
        )

        assert response.status_code == 200
        products = response.json()["products"]
        assert products["metadata"]["totalCount"] == 5
        assert [p["price"] for p in products["data"]] == [30.0, 40.0]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty_but_counted(self, test_client, seed_products):
        await seed_products([{}, {}])

        response = await test_client.get(
            "/api/products", params={"itemsPerPage": "2", "pageNum": "5"}
        )

        products = response.json()["products"]
        assert products["metadata"]["totalCount"] == 2
        assert products["data"] == []

    @pytest.mark.asyncio
    async def test_filters_combine(self, test_client, seed_products):
        await seed_products([
            {"name": "match", "rating": 4.5, "fast_delivery": True, "in_stock": 2},
            {"name": "low rating", "rating": 2.0, "fast_delivery": True, "in_stock": 2},
            {"name": "slow", "rating": 4.5, "fast_delivery": False, "in_stock": 2},
            {"name": "sold out", "rating": 4.5, "fast_delivery": True, "in_stock": 0},
        ])

        response = await test_client.get(
            "/api/products",
            params={"byRating": "4", "byFastDelivery": "true", "byStock": "false"},
        )

        assert [p["name"] for p in response.json()["products"]["data"]] == ["match"]

    @pytest.mark.asyncio
    async def test_invalid_page_size_is_bad_request(self, test_client):
        response = await test_client.get("/api/products", params={"itemsPerPage": "lots"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_page_offset_out_of_range_is_bad_request(self, test_client, seed_products):
        await seed_products([{}])

        response = await test_client.get(
            "/api/products",
            params={"itemsPerPage": "2", "pageNum": str(10**20)},
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "pageNum"


class TestGetProductById:
    """GET /api/products/{id}"""

    @pytest.mark.asyncio
    async def test_owner_gets_full_document(self, test_client, seed_products, auth_headers, owner_id):
        (product,) = await seed_products([{"name": "Mine", "qty": 2.0}])

        response = await test_client.get(f"/api/products/{product.id}", headers=auth_headers(owner_id))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(product.id)
        assert body["user"] == owner_id
        assert body["name"] == "Mine"
        assert body["qty"] == 2.0
        assert {"price", "image", "fastDelivery", "inStock", "rating", "createdAt", "updatedAt"} <= body.keys()

    @pytest.mark.asyncio
    async def test_non_owner_is_unauthorized(self, test_client, seed_products, auth_headers, other_user_id):
        (product,) = await seed_products([{}])

        response = await test_client.get(f"/api/products/{product.id}", headers=auth_headers(other_user_id))

        assert response.status_code == 401
        assert response.json()["message"] == "User not authorized"

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client, seed_products):
        (product,) = await seed_products([{}])

        response = await test_client.get(f"/api/products/{product.id}")

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"

    @pytest.mark.asyncio
    async def test_invalid_token(self, test_client, seed_products):
        (product,) = await seed_products([{}])

        response = await test_client.get(
            f"/api/products/{product.id}", headers={"Authorization": "Bearer nonsense"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized"

    @pytest.mark.asyncio
    async def test_unknown_id(self, test_client, auth_headers):
        response = await test_client.get(f"/api/products/{uuid.uuid4()}", headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["message"] == "Product not found"


class TestCreateProduct:
    """POST /api/products"""

    @pytest.mark.asyncio
    async def test_creates_product_for_caller(self, test_client, auth_headers, owner_id):
        response = await test_client.post(
            "/api/products", json=product_body(), headers=auth_headers(owner_id)
        )

        assert response.status_code == 201
        created = response.json()
        assert created["user"] == owner_id
        assert created["name"] == "Desk Lamp"
        assert created["fastDelivery"] is True

        listing = await test_client.get("/api/products")
        assert listing.json()["products"]["metadata"]["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_missing_name_is_bad_request(self, test_client, auth_headers):
        body = product_body()
        del body["name"]

        response = await test_client.post("/api/products", json=body, headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["message"] == "Please add a name"

    @pytest.mark.asyncio
    async def test_missing_required_field_is_bad_request(self, test_client, auth_headers):
        body = product_body()
        del body["price"]

        response = await test_client.post("/api/products", json=body, headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_oversized_stock_is_bad_request(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/products", json=product_body(inStock=10**20), headers=auth_headers()
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        listing = await test_client.get("/api/products")
        assert listing.json()["products"]["metadata"]["totalCount"] == 0

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client):
        response = await test_client.post("/api/products", json=product_body())

        assert response.status_code == 401


class TestUpdateProduct:
    """PUT /api/products/{id}"""

    @pytest.mark.asyncio
    async def test_owner_updates_partially(self, test_client, seed_products, auth_headers, owner_id):
        (product,) = await seed_products([{"name": "Old", "price": 10.0}])

        response = await test_client.put(
            f"/api/products/{product.id}",
            json={"price": 12.5, "inStock": 0},
            headers=auth_headers(owner_id),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["price"] == 12.5
        assert body["inStock"] == 0
        assert body["name"] == "Old"

        fetched = await test_client.get(f"/api/products/{product.id}", headers=auth_headers(owner_id))
        assert fetched.json()["price"] == 12.5

    @pytest.mark.asyncio
    async def test_non_owner_is_unauthorized(self, test_client, seed_products, auth_headers, other_user_id):
        (product,) = await seed_products([{"price": 10.0}])

        response = await test_client.put(
            f"/api/products/{product.id}",
            json={"price": 1.0},
            headers=auth_headers(other_user_id),
        )

        assert response.status_code == 401
        listing = await test_client.get("/api/products")
        assert listing.json()["products"]["data"][0]["price"] == 10.0

    @pytest.mark.asyncio
    async def test_null_for_required_field_is_bad_request(self, test_client, seed_products, auth_headers):
        (product,) = await seed_products([{}])

        response = await test_client.put(
            f"/api/products/{product.id}", json={"name": None}, headers=auth_headers()
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_blank_name_is_bad_request(self, test_client, seed_products, auth_headers, owner_id):
        (product,) = await seed_products([{"name": "Kettle"}])

        response = await test_client.put(
            f"/api/products/{product.id}", json={"name": "   "}, headers=auth_headers(owner_id)
        )

        assert response.status_code == 400
        fetched = await test_client.get(f"/api/products/{product.id}", headers=auth_headers(owner_id))
        assert fetched.json()["name"] == "Kettle"

    @pytest.mark.asyncio
    async def test_oversized_stock_is_bad_request(self, test_client, seed_products, auth_headers):
        (product,) = await seed_products([{}])

        response = await test_client.put(
            f"/api/products/{product.id}", json={"inStock": 10**20}, headers=auth_headers()
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_owner_id_and_timestamps_are_not_writable(
        self, test_client, seed_products, auth_headers, owner_id, other_user_id
    ):
        (product,) = await seed_products([{"price": 10.0}])
        original = await test_client.get(f"/api/products/{product.id}", headers=auth_headers(owner_id))

        response = await test_client.put(
            f"/api/products/{product.id}",
            json={
                "user": other_user_id,
                "id": str(uuid.uuid4()),
                "createdAt": "2000-01-01T00:00:00Z",
                "price": 1.0,
            },
            headers=auth_headers(owner_id),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == owner_id
        assert body["id"] == str(product.id)
        assert body["createdAt"] == original.json()["createdAt"]
        assert body["price"] == 1.0

        fetched = await test_client.get(f"/api/products/{product.id}", headers=auth_headers(owner_id))
        assert fetched.status_code == 200
        assert fetched.json()["user"] == owner_id


class TestDeleteProduct:
    """DELETE /api/products/{id}"""

    @pytest.mark.asyncio
    async def test_owner_deletes(self, test_client, seed_products, auth_headers, owner_id):
        (product,) = await seed_products([{}])

        response = await test_client.delete(f"/api/products/{product.id}", headers=auth_headers(owner_id))

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": str(product.id)}
        listing = await test_client.get("/api/products")
        assert listing.json()["products"]["metadata"]["totalCount"] == 0

    @pytest.mark.asyncio
    async def test_non_owner_is_unauthorized(self, test_client, seed_products, auth_headers, other_user_id):
        (product,) = await seed_products([{}])

        response = await test_client.delete(
            f"/api/products/{product.id}", headers=auth_headers(other_user_id)
        )

        assert response.status_code == 401
        listing = await test_client.get("/api/products")
        assert listing.json()["products"]["metadata"]["totalCount"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("product_id", [str(uuid.uuid4()), "not-a-uuid"])
    async def test_unknown_id(self, test_client, auth_headers, product_id):
        response = await test_client.delete(f"/api/products/{product_id}", headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["message"] == "Product not found"


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
        assert "X-Request-ID" in response.headers


class TestUnexpectedErrorHandler:
    """The catch-all 500 handler runs after the request id context is reset."""

    @pytest.mark.asyncio
    async def test_body_carries_request_id_from_request_state(self):
        from starlette.requests import Request

        from app.main import create_app

        handler = create_app().exception_handlers[Exception]
        request = Request({
            "type": "http",
            "method": "GET",
            "path": "/api/products",
            "headers": [],
            "state": {"request_id": "req-abc123"},
        })

        response = await handler(request, RuntimeError("boom"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "req-abc123"
