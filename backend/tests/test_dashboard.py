"""Customer and admin dashboards."""
from decimal import Decimal


def test_customer_dashboard(client, customer_headers, make_product, place_order, advance_order):
    bread = make_product(price="50.00")
    first = place_order([(bread, 1)])
    place_order([(bread, 4)])
    advance_order(first["id"], "CANCELLED")

    stats = client.get("/customer/dashboard/stats", headers=customer_headers).json()
    assert stats["total_orders"] == 2
    # 4 x 50 reaches the free-delivery threshold
    assert Decimal(stats["total_spent"]) == Decimal("200.00")
    assert stats["pending_orders"] == 1

    recent = client.get("/customer/dashboard/recent-orders", params={"limit": 1}, headers=customer_headers).json()
    assert len(recent["orders"]) == 1
    assert recent["orders"][0]["item_count"] == 4


def test_admin_dashboard(client, admin_headers, customer, make_product, place_order):
    bread = make_product(price="50.00", stock=8)
    place_order([(bread, 4)])

    stats = client.get("/admin/dashboard/stats", headers=admin_headers).json()

    assert stats["today_orders"] == 1
    assert Decimal(stats["today_revenue"]) == Decimal("200.00")
    assert stats["pending_orders"] == 1
    assert stats["total_customers"] == 1
    assert [p["name"] for p in stats["low_stock_products"]] == ["Sourdough Loaf"]
    assert Decimal(stats["outstanding_cod"]["total"]) == Decimal("200.00")


def test_admin_dashboard_is_admin_only(client, staff_headers):
    assert client.get("/admin/dashboard/stats", headers=staff_headers).status_code == 403
