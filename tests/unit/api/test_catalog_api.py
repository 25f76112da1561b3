"""API tests for product and category endpoints."""

import uuid

import pytest

from src.storefront.core.models.catalog import PRICE_ORDER_MESSAGE


def _product_body(category_id: str, **overrides) -> dict:
    body = {
        "name": "MacBook Pro 16",
        "slug": "macbook-pro-16",
        "description": "Apple laptop",
        "price": 2499.99,
        "stock": 8,
        "sku": "MBP16",
        "categoryIds": [category_id],
    }
    body.update(overrides)
    return body


class TestProductWrites:
    def test_admin_creates_product(self, client, admin_headers, electronics):
        response = client.post(
            "/products", json=_product_body(electronics.id), headers=admin_headers
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["slug"] == "macbook-pro-16"
        assert data["price"] == 2499.99
        assert data["isInStock"] is True
        assert data["isLowStock"] is True
        assert data["categories"][0]["slug"] == "electronics"
        assert data["createdBy"]["email"] == "admin@ecommerce.local"

    def test_anonymous_cannot_create(self, client, electronics):
        response = client.post("/products", json=_product_body(electronics.id))

        assert response.status_code == 401

    def test_customer_cannot_create(self, client, customer_headers, electronics):
        response = client.post(
            "/products", json=_product_body(electronics.id), headers=customer_headers
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Missing required role: admin"

    def test_duplicate_slug(self, client, admin_headers, electronics, product_factory):
        product_factory("macbook-pro-16")

        response = client.post(
            "/products", json=_product_body(electronics.id), headers=admin_headers
        )

        assert response.status_code == 409

    def test_unknown_category_lists_missing_ids(self, client, admin_headers):
        missing = str(uuid.uuid4())

        response = client.post("/products", json=_product_body(missing), headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"missingIds": [missing]}

    @pytest.mark.parametrize(
        "overrides",
        [
            {"slug": "Not A Slug"},
            {"price": -1},
            {"stock": -5},
            {"name": "ab"},
            {"categoryIds": []},
        ],
    )
    def test_invalid_payloads(self, client, admin_headers, electronics, overrides):
        response = client.post(
            "/products", json=_product_body(electronics.id, **overrides), headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_partial_update(self, client, admin_headers, product_factory):
        product = product_factory("laptop", price="1000.00")

        response = client.patch(
            f"/products/{product.id}", json={"stock": 0}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stock"] == 0
        assert data["isInStock"] is False
        assert data["price"] == 1000.0

    def test_update_rejects_null_price(self, client, admin_headers, product_factory):
        product = product_factory("laptop")

        response = client.patch(
            f"/products/{product.id}", json={"price": None}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "price cannot be null"

    def test_delete_returns_no_content(self, client, admin_headers, product_factory):
        product = product_factory("laptop")

        response = client.delete(f"/products/{product.id}", headers=admin_headers)

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/products/{product.id}").status_code == 404


class TestProductReads:
    def test_get_by_id_counts_views(self, client, product_factory):
        product = product_factory("laptop")

        first = client.get(f"/products/{product.id}")
        second = client.get(f"/products/{product.id}")

        assert first.json()["data"]["viewCount"] == 0
        assert second.json()["data"]["viewCount"] == 1

    def test_get_by_slug(self, client, product_factory):
        product_factory("laptop")

        response = client.get("/products/slug/laptop")

        assert response.status_code == 200
        assert response.json()["data"]["slug"] == "laptop"

    def test_owner_hidden_from_anonymous_callers(
        self, client, customer_headers, admin_user, product_factory
    ):
        product = product_factory("laptop", created_by=admin_user)

        anonymous = client.get(f"/products/{product.id}").json()["data"]
        signed_in = client.get(f"/products/{product.id}", headers=customer_headers).json()["data"]

        assert anonymous["createdBy"] == {}
        assert signed_in["createdBy"]["id"] == admin_user.id

    def test_invalid_id_is_a_validation_error(self, client):
        response = client.get("/products/not-a-uuid")

        assert response.status_code == 400

    def test_missing_product(self, client):
        response = client.get(f"/products/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Product not found"

    def test_list_is_paginated(self, client, product_factory):
        for index in range(3):
            product_factory(f"item-{index}")

        body = client.get("/products", params={"limit": 2}).json()

        assert len(body["data"]) == 2
        assert body["pagination"] == {
            "page": 1,
            "limit": 2,
            "total": 3,
            "totalPages": 2,
            "hasNext": True,
            "hasPrevious": False,
        }

    def test_popular_and_recent(self, client, product_factory):
        product_factory("sold", order_count=4)
        product_factory("unsold")

        popular = client.get("/products/popular").json()["data"]
        recent = client.get("/products/recent", params={"limit": 1}).json()["data"]

        assert [p["slug"] for p in popular] == ["sold"]
        assert len(recent) == 1

    def test_products_by_category(self, client, electronics, product_factory):
        product_factory("laptop", categories=[electronics])
        product_factory("sofa")

        response = client.get(f"/products/category/{electronics.id}")

        assert [p["slug"] for p in response.json()["data"]] == ["laptop"]
        assert client.get(f"/products/category/{uuid.uuid4()}").status_code == 404


class TestProductSearch:
    @pytest.fixture(autouse=True)
    def catalogue(self, electronics, product_factory):
        product_factory("samsung-tv", name="Samsung TV", price="800", categories=[electronics])
        product_factory("samsung-buds", name="Samsung Buds", price="120", stock=0)
        product_factory("oak-desk", name="Oak Desk", price="300")

    def test_search_with_pagination_block(self, client):
        response = client.get(
            "/products/search",
            params={"search": "samsung", "sortBy": "price", "sortOrder": "ASC", "limit": 1},
        )

        assert response.status_code == 200
        body = response.json()
        assert [p["slug"] for p in body["data"]] == ["samsung-buds"]
        assert body["pagination"]["total"] == 2
        assert body["pagination"]["totalPages"] == 2

    def test_camel_case_filters(self, client, electronics):
        response = client.get(
            "/products/search",
            params={"categoryId": electronics.id, "minPrice": 100, "inStock": "true"},
        )

        assert [p["slug"] for p in response.json()["data"]] == ["samsung-tv"]

    def test_price_order_is_validated(self, client):
        response = client.get("/products/search", params={"minPrice": 500, "maxPrice": 100})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == PRICE_ORDER_MESSAGE

    def test_unknown_sort_field(self, client):
        response = client.get("/products/search", params={"sortBy": "colour"})

        assert response.status_code == 400


class TestCategories:
    def test_crud(self, client, admin_headers):
        created = client.post(
            "/categories",
            json={"name": "Books", "slug": "books", "metadata": {"icon": "book"}},
            headers=admin_headers,
        )
        assert created.status_code == 201
        category_id = created.json()["data"]["id"]
        assert created.json()["data"]["metadata"] == {"icon": "book"}

        updated = client.patch(
            f"/categories/{category_id}", json={"sortOrder": 4}, headers=admin_headers
        )
        assert updated.json()["data"]["sortOrder"] == 4

        listed = client.get("/categories").json()["data"]
        assert [c["slug"] for c in listed] == ["books"]

        deleted = client.delete(f"/categories/{category_id}", headers=admin_headers)
        assert deleted.status_code == 204
        assert client.get(f"/categories/{category_id}").status_code == 404

    def test_category_with_products_cannot_be_deleted(
        self, client, admin_headers, electronics, product_factory
    ):
        product_factory("laptop", categories=[electronics])

        response = client.delete(f"/categories/{electronics.id}", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    def test_get_includes_product_count(self, client, electronics, product_factory):
        product_factory("laptop", categories=[electronics])

        data = client.get(f"/categories/{electronics.id}").json()["data"]

        assert data["productCount"] == 1

    def test_customers_cannot_create(self, client, customer_headers):
        response = client.post(
            "/categories", json={"name": "Books", "slug": "books"}, headers=customer_headers
        )

        assert response.status_code == 403
