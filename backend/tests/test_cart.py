"""Shopping cart endpoints."""
from decimal import Decimal


def add(client, headers, product, quantity=1):
    return client.post("/cart/items", json={"product_id": product.id, "quantity": quantity}, headers=headers)


def test_new_customer_has_empty_cart(client, customer_headers):
    response = client.get("/cart/", headers=customer_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["items"] == []
    assert Decimal(body["sub_total"]) == Decimal("0")
    assert body["total_items"] == 0


def test_adding_same_product_merges_lines(client, customer_headers, make_product):
    bread = make_product()
    add(client, customer_headers, bread, 2)
    body = add(client, customer_headers, bread, 3).json()

    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 5
    assert Decimal(body["items"][0]["line_total"]) == Decimal("250.00")


def test_totals_across_products(client, customer_headers, make_product):
    bread = make_product()
    croissant = make_product(name="Butter Croissant", price="18.50")
    add(client, customer_headers, bread, 1)
    body = add(client, customer_headers, croissant, 2).json()

    assert Decimal(body["sub_total"]) == Decimal("87.00")
    assert body["total_items"] == 3
    assert body["total_unique_items"] == 2


def test_cannot_add_more_than_stock(client, customer_headers, make_product):
    bread = make_product(stock=3)
    add(client, customer_headers, bread, 2)

    response = add(client, customer_headers, bread, 2)

    assert response.status_code == 400
    assert "Only 3" in response.json()["detail"]


def test_untracked_products_ignore_stock(client, customer_headers, make_product):
    cake = make_product(name="Custom Cake", stock=0, tracking=False)

    assert add(client, customer_headers, cake, 10).status_code == 200


def test_inactive_or_unknown_product_is_404(client, db, customer_headers, make_product):
    bread = make_product()
    bread.is_active = False
    db.commit()

    assert add(client, customer_headers, bread).status_code == 404
    response = client.post("/cart/items", json={"product_id": 999, "quantity": 1}, headers=customer_headers)
    assert response.status_code == 404


def test_quantity_bounds_are_validated(client, customer_headers, make_product):
    bread = make_product()

    assert add(client, customer_headers, bread, 0).status_code == 400
    assert add(client, customer_headers, bread, 100).status_code == 400


def test_update_and_remove_by_zero_quantity(client, customer_headers, make_product):
    bread = make_product()
    item_id = add(client, customer_headers, bread, 1).json()["items"][0]["id"]

    updated = client.patch(f"/cart/items/{item_id}", json={"quantity": 4}, headers=customer_headers)
    assert updated.json()["items"][0]["quantity"] == 4

    emptied = client.patch(f"/cart/items/{item_id}", json={"quantity": 0}, headers=customer_headers)
    assert emptied.status_code == 200
    assert emptied.json()["items"] == []


def test_update_over_stock_is_rejected(client, customer_headers, make_product):
    bread = make_product(stock=5)
    item_id = add(client, customer_headers, bread, 1).json()["items"][0]["id"]

    response = client.patch(f"/cart/items/{item_id}", json={"quantity": 6}, headers=customer_headers)
    assert response.status_code == 400


def test_cannot_touch_another_customers_item(client, customer_headers, make_user, make_product):
    bread = make_product()
    item_id = add(client, customer_headers, bread, 1).json()["items"][0]["id"]
    _, other_headers = make_user("omar@example.com")

    assert client.patch(f"/cart/items/{item_id}", json={"quantity": 2}, headers=other_headers).status_code == 404
    assert client.delete(f"/cart/items/{item_id}", headers=other_headers).status_code == 404


def test_delete_item_and_clear(client, customer_headers, make_product):
    bread = make_product()
    croissant = make_product(name="Butter Croissant", price="18.50")
    add(client, customer_headers, bread)
    item_id = add(client, customer_headers, croissant).json()["items"][1]["id"]

    after_delete = client.delete(f"/cart/items/{item_id}", headers=customer_headers).json()
    assert [i["name_snapshot"] for i in after_delete["items"]] == ["Sourdough Loaf"]

    cleared = client.delete("/cart/", headers=customer_headers).json()
    assert cleared["items"] == []


def test_cart_requires_login(client):
    assert client.get("/cart/").status_code == 401
