import pytest
from sqlalchemy.exc import OperationalError

import crud

NOT_FOUND = {"message": "Short URL not found or inactive", "statusCode": 404}


class TestRedirect:

    def test_active_link_redirects_with_307_and_counts(self, client, alice, create_link):
        link = create_link(alice["headers"], "https://example.com/page")

        response = client.get(f"/{link['shortId']}", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "https://example.com/page"
        stats = client.get(f"/api/urls/{link['id']}/stats", headers=alice["headers"]).json()["data"]
        assert stats["totalClicks"] == 1
        assert stats["lastAccessedAt"] is not None

    def test_each_visit_is_counted(self, client, alice, create_link):
        link = create_link(alice["headers"])
        for _ in range(3):
            client.get(f"/{link['shortId']}", follow_redirects=False)
        data = client.get(f"/api/urls/{link['id']}", headers=alice["headers"]).json()["data"]
        assert data["clicks"] == 3

    def test_redirect_does_not_touch_updated_at(self, client, alice, create_link):
        link = create_link(alice["headers"])
        client.get(f"/{link['shortId']}", follow_redirects=False)
        data = client.get(f"/api/urls/{link['id']}", headers=alice["headers"]).json()["data"]
        assert data["updatedAt"] == link["updatedAt"]

    def test_inactive_and_unknown_look_the_same(self, client, alice, create_link):
        link = create_link(alice["headers"])
        client.patch(f"/api/urls/{link['id']}", json={"isActive": False}, headers=alice["headers"])

        inactive = client.get(f"/{link['shortId']}", follow_redirects=False)
        unknown = client.get("/Zz9_-Zz9", follow_redirects=False)

        assert inactive.status_code == unknown.status_code == 404
        assert inactive.json() == unknown.json() == NOT_FOUND

    def test_inactive_link_is_not_counted(self, client, alice, create_link):
        link = create_link(alice["headers"])
        client.patch(f"/api/urls/{link['id']}", json={"isActive": False}, headers=alice["headers"])
        client.get(f"/{link['shortId']}", follow_redirects=False)
        data = client.get(f"/api/urls/{link['id']}", headers=alice["headers"]).json()["data"]
        assert data["clicks"] == 0

    @pytest.mark.parametrize("junk", ["x", "favicon.ico", "waytoolongforashortid"])
    def test_malformed_ids_are_not_found(self, client, junk):
        response = client.get(f"/{junk}", follow_redirects=False)
        assert response.status_code == 404
        assert response.json() == NOT_FOUND

    def test_target_change_applies_to_next_visit(self, client, alice, create_link):
        link = create_link(alice["headers"], "https://example.com/old")
        client.patch(f"/api/urls/{link['id']}", json={"originalUrl": "https://example.com/new"},
                     headers=alice["headers"])
        response = client.get(f"/{link['shortId']}", follow_redirects=False)
        assert response.headers["location"] == "https://example.com/new"

    def test_failed_increment_aborts_redirect(self, client, alice, create_link, monkeypatch):
        link = create_link(alice["headers"])

        def broken(db, short_id):
            raise OperationalError("UPDATE short_urls", {}, Exception("disk I/O error"))

        monkeypatch.setattr(crud, "increment_click_and_touch", broken)
        response = client.get(f"/{link['shortId']}", follow_redirects=False)

        assert response.status_code == 500
        assert "location" not in response.headers
        assert response.json() == {"message": "Internal Server Error", "statusCode": 500}

    def test_api_paths_are_not_treated_as_short_ids(self, client):
        assert client.get("/api/health").json()["status"] == "ok"

    def test_wrong_method_keeps_allow_header(self, client):
        response = client.post("/api/health")
        assert response.status_code == 405
        assert "GET" in response.headers["allow"]
        assert response.json() == {"message": "Method Not Allowed", "statusCode": 405}
