from datetime import timedelta

from fastapi.testclient import TestClient

from shortlink_app.config import settings
from shortlink_app.models import URL
from shortlink_app.models.url import utcnow

USER = {"X-User-Id": "42"}
OTHER_USER = {"X-User-Id": "7"}
PREMIUM_USER = {"X-User-Id": "99", "X-User-Premium": "true"}


def shorten(client: TestClient, long_url="https://www.google.com/", headers=None, **fields):
    return client.post("/api/v1/urls/", json={"long_url": long_url, **fields}, headers=headers or {})


class TestCreate:

    def test_create_short_url(self, client: TestClient):
        response = shorten(client)
        assert response.status_code == 201

        data = response.json()
        assert len(data["short_code"]) == settings.short_code_length
        assert data["short_url"] == f"{settings.base_url}/{data['short_code']}"
        assert data["long_url"] == "https://www.google.com/"
        assert data["redirect"] == "permanent"
        assert data["owner_id"] == 0
        assert "expires_at" in data

    def test_resubmission_returns_existing_mapping(self, client: TestClient):
        first = shorten(client)
        second = shorten(client)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["short_code"] == first.json()["short_code"]

    def test_bare_host_gets_http_scheme(self, client: TestClient):
        response = shorten(client, "example.com")

        assert response.status_code == 201
        assert response.json()["long_url"].startswith("http://example.com")

    def test_invalid_url(self, client: TestClient):
        response = shorten(client, "https://")
        assert response.status_code == 422

    def test_user_custom_code(self, client: TestClient):
        response = shorten(client, headers=USER, short_code="mylink", redirect="temporary")

        assert response.status_code == 201
        data = response.json()
        assert data["short_code"] == "mylink"
        assert data["redirect"] == "temporary"
        assert data["owner_id"] == 42

    def test_taken_custom_code_conflicts(self, client: TestClient):
        shorten(client, headers=USER, short_code="mylink")

        response = shorten(client, "https://other.example/", headers=OTHER_USER, short_code="mylink")

        assert response.status_code == 409

    def test_custom_code_too_short(self, client: TestClient):
        response = shorten(client, headers=USER, short_code="abc12")
        assert response.status_code == 422

    def test_premium_users_get_short_aliases(self, client: TestClient):
        response = shorten(client, headers=PREMIUM_USER, short_code="abcd")

        assert response.status_code == 201
        assert response.json()["short_code"] == "abcd"

    def test_custom_code_must_be_alphanumeric(self, client: TestClient):
        response = shorten(client, headers=USER, short_code="my-link!")
        assert response.status_code == 422


class TestRedirect:

    def test_redirect_url(self, client: TestClient):
        short_code = shorten(client, "https://www.github.com/").json()["short_code"]

        response = client.get(f"/{short_code}", follow_redirects=False)

        assert response.status_code == 308
        assert response.headers["location"] == "https://www.github.com/"

    def test_temporary_redirect(self, client: TestClient):
        short_code = shorten(
            client, "https://www.github.com/", headers=USER, redirect="temporary"
        ).json()["short_code"]

        response = client.get(f"/{short_code}", follow_redirects=False)

        assert response.status_code == 307

    def test_redirect_nonexistent_url(self, client: TestClient):
        response = client.get("/nonexistent", follow_redirects=False)
        assert response.status_code == 404

    def test_expired_link_is_gone(self, client: TestClient, db_session):
        short_code = shorten(client).json()["short_code"]
        url = db_session.query(URL).filter(URL.short_code == short_code).one()
        url.modified_at = utcnow() - timedelta(seconds=settings.link_ttl_seconds + 1)
        db_session.commit()

        response = client.get(f"/{short_code}", follow_redirects=False)

        assert response.status_code == 410


class TestManage:

    def test_get_url_info(self, client: TestClient):
        short_code = shorten(client, headers=USER).json()["short_code"]

        response = client.get(f"/api/v1/urls/{short_code}", headers=USER)

        assert response.status_code == 200
        assert response.json()["short_code"] == short_code

    def test_other_users_links_are_hidden(self, client: TestClient):
        short_code = shorten(client, headers=USER).json()["short_code"]

        response = client.get(f"/api/v1/urls/{short_code}", headers=OTHER_USER)

        assert response.status_code == 404

    def test_anonymous_cannot_manage(self, client: TestClient):
        short_code = shorten(client).json()["short_code"]

        assert client.get(f"/api/v1/urls/{short_code}").status_code == 401
        assert client.delete(f"/api/v1/urls/{short_code}").status_code == 401

    def test_edit_renames_link(self, client: TestClient):
        short_code = shorten(client, headers=USER).json()["short_code"]

        response = client.patch(
            f"/api/v1/urls/{short_code}",
            json={"short_code": "renamed1", "redirect": "temporary"},
            headers=USER,
        )

        assert response.status_code == 202
        assert response.json()["short_code"] == "renamed1"
        assert client.get("/renamed1", follow_redirects=False).status_code == 307
        assert client.get(f"/{short_code}", follow_redirects=False).status_code == 404

    def test_edit_onto_taken_code_conflicts(self, client: TestClient):
        shorten(client, headers=USER, short_code="taken12")
        short_code = shorten(client, "https://other.example/", headers=USER).json()["short_code"]

        response = client.patch(
            f"/api/v1/urls/{short_code}", json={"short_code": "taken12"}, headers=USER
        )

        assert response.status_code == 409

    def test_empty_edit_is_rejected(self, client: TestClient):
        short_code = shorten(client, headers=USER).json()["short_code"]

        response = client.patch(f"/api/v1/urls/{short_code}", json={}, headers=USER)

        assert response.status_code == 422

    def test_delete_url(self, client: TestClient):
        short_code = shorten(client, "https://www.python.org", headers=USER).json()["short_code"]

        response = client.delete(f"/api/v1/urls/{short_code}", headers=USER)
        assert response.status_code == 204

        response = client.get(f"/{short_code}", follow_redirects=False)
        assert response.status_code == 404

    def test_url_analytics(self, client: TestClient):
        short_code = shorten(client, "https://www.stackoverflow.com/", headers=USER).json()["short_code"]

        client.get(f"/{short_code}", follow_redirects=False, headers={"Referer": "https://a.example/"})
        client.get(f"/{short_code}", follow_redirects=False)

        response = client.get(f"/api/v1/urls/{short_code}/analytics", headers=USER)
        assert response.status_code == 200

        data = response.json()
        assert data["short_code"] == short_code
        assert data["total"] == 2
        assert data["entries"][0]["referrer"] == "https://a.example/"


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
