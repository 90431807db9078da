"""CMS pages, banners and the test-email endpoint."""
from datetime import timedelta

from utils.clock import local_now


def create_page(client, headers, **overrides):
    payload = {"title": "About Us", "slug": "about-us", "content": "Baking since 1998.", "status": "PUBLISHED",
               "show_in_navigation": True, "navigation_order": 2}
    payload.update(overrides)
    return client.post("/admin/pages", json=payload, headers=headers)


def stamp(dt):
    return dt.strftime("%Y-%m-%dT%H:%M:%S")


class TestPages:
    def test_published_page_is_public(self, client, admin_headers):
        created = create_page(client, admin_headers)
        assert created.status_code == 201
        assert created.json()["published_at"] is not None

        response = client.get("/pages/about-us")
        assert response.status_code == 200
        assert response.json()["content"] == "Baking since 1998."

    def test_draft_is_hidden_until_published(self, client, admin_headers):
        page_id = create_page(client, admin_headers, status="DRAFT").json()["id"]
        assert client.get("/pages/about-us").status_code == 404

        client.patch(f"/admin/pages/{page_id}", json={"status": "PUBLISHED"}, headers=admin_headers)
        assert client.get("/pages/about-us").status_code == 200

    def test_navigation_lists_published_pages_in_order(self, client, admin_headers):
        create_page(client, admin_headers)
        create_page(client, admin_headers, title="Contact", slug="contact", navigation_order=1)
        create_page(client, admin_headers, title="Hidden", slug="hidden", show_in_navigation=False)

        assert [p["slug"] for p in client.get("/navigation").json()] == ["contact", "about-us"]

    def test_duplicate_slug(self, client, admin_headers):
        create_page(client, admin_headers)
        assert create_page(client, admin_headers).status_code == 400

    def test_delete_page(self, client, admin_headers):
        page_id = create_page(client, admin_headers).json()["id"]

        assert client.delete(f"/admin/pages/{page_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/admin/pages/{page_id}", headers=admin_headers).status_code == 404

    def test_admin_only(self, client, staff_headers):
        assert client.get("/admin/pages", headers=staff_headers).status_code == 403


class TestBanners:
    def test_active_banners_respect_window_and_priority(self, client, admin_headers):
        now = local_now()
        client.post("/admin/banners", json={"title": "Low", "priority": 1}, headers=admin_headers)
        client.post("/admin/banners", json={"title": "High", "priority": 5}, headers=admin_headers)
        client.post("/admin/banners", json={"title": "Expired", "end_date": stamp(now - timedelta(days=1))},
                    headers=admin_headers)
        client.post("/admin/banners", json={"title": "Off", "is_active": False}, headers=admin_headers)

        assert [b["title"] for b in client.get("/banners").json()] == ["High", "Low"]

    def test_banners_for_a_page(self, client, admin_headers):
        client.post("/admin/banners", json={"title": "Everywhere"}, headers=admin_headers)
        client.post("/admin/banners", json={"title": "Home only", "target_pages": ["home"]}, headers=admin_headers)

        assert {b["title"] for b in client.get("/banners", params={"page": "home"}).json()} == {"Everywhere",
                                                                                               "Home only"}
        assert [b["title"] for b in client.get("/banners", params={"page": "menu"}).json()] == ["Everywhere"]

    def test_end_before_start_is_rejected(self, client, admin_headers):
        now = local_now()
        payload = {"title": "Bad", "start_date": stamp(now), "end_date": stamp(now - timedelta(days=1))}
        assert client.post("/admin/banners", json=payload, headers=admin_headers).status_code == 400

        banner_id = client.post("/admin/banners", json={"title": "Ok", "start_date": stamp(now)},
                                headers=admin_headers).json()["id"]
        response = client.patch(f"/admin/banners/{banner_id}", json={"end_date": stamp(now - timedelta(days=1))},
                                headers=admin_headers)
        assert response.status_code == 400


def test_send_test_email_without_smtp(client, admin_headers):
    response = client.post("/admin/email/test", json={"to": "owner@bakery.test"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
