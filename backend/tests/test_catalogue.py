"""Categories and products, public reads and admin writes."""


def product_payload(category_id, **overrides):
    payload = {
        "name": "Za'atar Manakish",
        "slug": "zaatar-manakish",
        "price": "22.00",
        "cost": "8.00",
        "category_id": category_id,
        "short_description": "Flatbread with thyme and sesame",
        "stock_qty": 30,
        "allergens": ["gluten", "sesame"],
    }
    payload.update(overrides)
    return payload


class TestCategories:
    def test_list_includes_product_count(self, client, category, make_product):
        make_product()
        make_product(name="Rye Loaf")

        body = client.get("/categories/").json()

        assert [c["slug"] for c in body] == ["breads"]
        assert body[0]["product_count"] == 2

    def test_inactive_categories_are_hidden(self, client, db, category):
        category.is_active = False
        db.commit()

        assert client.get("/categories/").json() == []
        assert client.get("/categories/slug/breads").status_code == 404

    def test_get_by_slug_and_id(self, client, category):
        assert client.get("/categories/slug/breads").json()["id"] == category.id
        assert client.get(f"/categories/{category.id}").json()["name"] == "Breads"
        assert client.get("/categories/999").status_code == 404

    def test_admin_creates_and_updates(self, client, admin_headers):
        created = client.post("/categories/", json={"name": "Pastries", "slug": "pastries"}, headers=admin_headers)
        assert created.status_code == 201

        category_id = created.json()["id"]
        updated = client.patch(f"/categories/{category_id}", json={"display_order": 3}, headers=admin_headers)
        assert updated.json()["display_order"] == 3

    def test_duplicate_or_malformed_slug(self, client, admin_headers, category):
        assert client.post("/categories/", json={"name": "Bread", "slug": "breads"},
                           headers=admin_headers).status_code == 400
        assert client.post("/categories/", json={"name": "Cakes", "slug": "Cakes!"},
                           headers=admin_headers).status_code == 400

    def test_category_with_products_cannot_be_deleted(self, client, admin_headers, category, make_product):
        make_product()
        assert client.delete(f"/categories/{category.id}", headers=admin_headers).status_code == 400

    def test_empty_category_can_be_deleted(self, client, admin_headers, category):
        assert client.delete(f"/categories/{category.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/categories/{category.id}").status_code == 404

    def test_customers_cannot_write(self, client, customer_headers):
        response = client.post("/categories/", json={"name": "Pastries", "slug": "pastries"}, headers=customer_headers)
        assert response.status_code == 403


class TestProducts:
    def test_list_is_paginated(self, client, make_product):
        for name in ("Baguette", "Ciabatta", "Focaccia"):
            make_product(name=name)

        body = client.get("/products/", params={"page": 2, "limit": 2}).json()

        assert body["total"] == 3
        assert [p["name"] for p in body["products"]] == ["Focaccia"]

    def test_filter_by_category_and_search(self, client, db, make_product):
        make_product(name="Baguette")
        make_product(name="Ciabatta")

        assert client.get("/products/", params={"category": "breads"}).json()["total"] == 2
        assert client.get("/products/", params={"category": "cakes"}).json()["total"] == 0
        found = client.get("/products/", params={"search": "bagu"}).json()
        assert [p["slug"] for p in found["products"]] == ["baguette"]

    def test_inactive_products_are_hidden(self, client, db, make_product):
        bread = make_product()
        bread.is_active = False
        db.commit()

        assert client.get("/products/").json()["total"] == 0
        assert client.get(f"/products/{bread.id}").status_code == 404
        assert client.get("/products/slug/sourdough-loaf").status_code == 404

    def test_product_detail_includes_category(self, client, make_product):
        bread = make_product()
        body = client.get(f"/products/{bread.id}").json()

        assert body["category"]["slug"] == "breads"
        assert client.get("/products/slug/sourdough-loaf").json()["id"] == bread.id

    def test_admin_creates_product(self, client, admin_headers, category):
        response = client.post("/products/", json=product_payload(category.id), headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["allergens"] == ["gluten", "sesame"]

    def test_create_validations(self, client, admin_headers, category):
        client.post("/products/", json=product_payload(category.id), headers=admin_headers)

        duplicate = client.post("/products/", json=product_payload(category.id), headers=admin_headers)
        assert duplicate.status_code == 400
        assert "already exists" in duplicate.json()["detail"]

        unknown_category = client.post("/products/", json=product_payload(999, slug="other"), headers=admin_headers)
        assert unknown_category.status_code == 400

        free = client.post("/products/", json=product_payload(category.id, slug="free", price="0"),
                           headers=admin_headers)
        assert free.status_code == 400

    def test_update_product(self, client, admin_headers, make_product):
        bread = make_product()
        response = client.patch(f"/products/{bread.id}", json={"price": "55.00", "stock_qty": 12},
                                headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["stock_qty"] == 12

    def test_delete_is_soft_and_keeps_slug_reserved(self, client, admin_headers, category, make_product):
        bread = make_product()

        assert client.delete(f"/products/{bread.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/products/{bread.id}").status_code == 404

        payload = product_payload(category.id, name="Sourdough Loaf", slug="sourdough-loaf")
        assert client.post("/products/", json=payload, headers=admin_headers).status_code == 400

    def test_staff_cannot_manage_products(self, client, staff_headers, category):
        response = client.post("/products/", json=product_payload(category.id), headers=staff_headers)
        assert response.status_code == 403
