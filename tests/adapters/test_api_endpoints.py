# tests/adapters/test_api_endpoints.py
import pytest
from fastapi import status
from fastapi.testclient import TestClient

from techfolio.adapters.api.main import create_app

ADMIN = {"X-Caller-Role": "admin"}
USER = {"X-Caller-Role": "user"}

@pytest.fixture
def client(container):
    """
    Returns a FastAPI TestClient.

    The 'container' fixture (from conftest.py) has already swapped the
    repositories for fresh in-memory ones.
    """
    app = create_app()
    with TestClient(app) as c:
        yield c

def create_category(client, name, parent_id=None, **extra):
    response = client.post(
        "/api/v1/categories",
        json={"name": name, "parent_id": parent_id, **extra},
        headers=ADMIN,
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()

class TestHealth:
    def test_liveness(self, client):
        response = client.get("/health/live")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "ok"

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == status.HTTP_200_OK
        assert set(response.json().values()) == {"up"}

class TestCategoryEndpoints:
    def test_category_scenario(self, client):
        """
        Scenario: Engineering > Backend over HTTP.
        Expected: Cycle move is 409 invalid_operation; duplicate slug is
        409 conflict; deleting the childless child succeeds.
        """
        engineering = create_category(client, "Engineering")
        backend = create_category(client, "Backend", parent_id=engineering["id"])
        assert (engineering["slug"], backend["slug"]) == ("engineering", "backend")

        response = client.post(
            f"/api/v1/categories/{engineering['id']}/move",
            json={"parent_id": backend["id"]},
            headers=ADMIN,
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {
            "status": "error",
            "code": "invalid_operation",
            "message": response.json()["message"],
        }

        response = client.post("/api/v1/categories", json={"name": "X", "slug": "backend"}, headers=ADMIN)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "conflict"

        response = client.delete(
            f"/api/v1/categories/{backend['id']}",
            params={"policy": "block_if_has_children"},
            headers=ADMIN,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"removed": [backend["id"]]}

    def test_queries(self, client):
        root = create_category(client, "Root")
        child = create_category(client, "Child", parent_id=root["id"])
        grandchild = create_category(client, "Grandchild", parent_id=child["id"])

        ancestors = client.get(f"/api/v1/categories/{grandchild['id']}/ancestors").json()
        assert [a["id"] for a in ancestors] == [child["id"], root["id"]]

        descendants = client.get(f"/api/v1/categories/{root['id']}/descendants").json()
        assert [d["id"] for d in descendants] == [child["id"], grandchild["id"]]

        roots = client.get("/api/v1/categories", params={"children_only": True}).json()
        assert [r["id"] for r in roots] == [root["id"]]

    def test_rename_and_reorder(self, client):
        root = create_category(client, "Root")
        a = create_category(client, "A", parent_id=root["id"])
        b = create_category(client, "B", parent_id=root["id"])

        response = client.patch(f"/api/v1/categories/{a['id']}", json={"name": "Alpha"}, headers=ADMIN)
        assert response.json()["name"] == "Alpha"

        response = client.post(
            "/api/v1/categories/reorder",
            json={"parent_id": root["id"], "ordered_ids": [b["id"], a["id"]]},
            headers=ADMIN,
        )
        assert response.status_code == status.HTTP_200_OK
        children = client.get(
            "/api/v1/categories", params={"parent_id": root["id"], "children_only": True}
        ).json()
        assert [c["id"] for c in children] == [b["id"], a["id"]]

    def test_unknown_category(self, client):
        response = client.get("/api/v1/categories/missing")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "not_found"

    def test_user_cannot_create(self, client):
        response = client.post("/api/v1/categories", json={"name": "X"}, headers=USER)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["code"] == "permission_denied"

    def test_missing_role_header_means_user(self, client):
        response = client.post("/api/v1/categories", json={"name": "X"})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_role(self, client):
        response = client.get("/api/v1/categories", headers={"X-Caller-Role": "root"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

class TestContentEndpoints:
    def test_article_lifecycle(self, client):
        """
        Scenario: Draft article without a body, then fixed, published, archived.
        Expected: 422, 200 published, 200 archived, then 409 on republish.
        """
        response = client.post(
            "/api/v1/content",
            json={"kind": "article", "slug": "draft", "tags": ["Python"]},
            headers=ADMIN,
        )
        assert response.status_code == status.HTTP_201_CREATED
        item = response.json()
        assert item["state"] == "draft"
        assert item["tags"] == ["python"]

        response = client.post(f"/api/v1/content/{item['id']}/publish", headers=ADMIN)
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

        response = client.patch(
            f"/api/v1/content/{item['id']}",
            json={"title": "Hello", "body": "Some text"},
            headers=ADMIN,
        )
        assert response.status_code == status.HTTP_200_OK

        response = client.post(f"/api/v1/content/{item['id']}/publish", headers=ADMIN)
        assert response.json()["state"] == "published"

        response = client.post(f"/api/v1/content/{item['id']}/archive", headers=ADMIN)
        assert response.json()["state"] == "archived"

        response = client.post(f"/api/v1/content/{item['id']}/publish", headers=ADMIN)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "invalid_operation"

    def test_visibility_by_role(self, client):
        draft = client.post(
            "/api/v1/content", json={"kind": "project", "title": "Hidden"}, headers=ADMIN
        ).json()
        live = client.post(
            "/api/v1/content", json={"kind": "project", "title": "Shown"}, headers=ADMIN
        ).json()
        client.post(f"/api/v1/content/{live['id']}/publish", headers=ADMIN)

        listed = client.get("/api/v1/content", headers=USER).json()
        assert [i["id"] for i in listed] == [live["id"]]

        response = client.get(f"/api/v1/content/{draft['id']}", headers=USER)
        assert response.status_code == status.HTTP_404_NOT_FOUND

        listed = client.get("/api/v1/content", params={"kind": "project"}, headers=ADMIN).json()
        assert {i["id"] for i in listed} == {draft["id"], live["id"]}

    def test_field_of_other_kind_rejected(self, client):
        response = client.post(
            "/api/v1/content",
            json={"kind": "project", "title": "P", "body": "articles only"},
            headers=ADMIN,
        )
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_null_for_text_field_rejected(self, client):
        item = client.post(
            "/api/v1/content", json={"kind": "article", "title": "A", "body": "text"}, headers=ADMIN
        ).json()

        response = client.patch(f"/api/v1/content/{item['id']}", json={"body": None}, headers=ADMIN)
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

        response = client.get(f"/api/v1/content/{item['id']}", headers=ADMIN)
        assert response.json()["body"] == "text"

    def test_unpublish_and_delete(self, client):
        item = client.post(
            "/api/v1/content",
            json={"kind": "certificate", "title": "Cert", "asset_ref": "assets/c.png", "issued_on": "2024-01-31"},
            headers=ADMIN,
        ).json()
        assert item["issued_on"] == "2024-01-31"

        client.post(f"/api/v1/content/{item['id']}/publish", headers=ADMIN)
        response = client.post(f"/api/v1/content/{item['id']}/unpublish", headers=ADMIN)
        assert response.json()["state"] == "draft"

        response = client.delete(f"/api/v1/content/{item['id']}", headers=ADMIN)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        response = client.get(f"/api/v1/content/{item['id']}", headers=ADMIN)
        assert response.status_code == status.HTTP_404_NOT_FOUND

class TestTagEndpoints:
    def test_resolve_and_list(self, client):
        first = client.post("/api/v1/tags", json={"label": " FastAPI "}, headers=ADMIN).json()
        second = client.post("/api/v1/tags", json={"label": "fastapi"}, headers=ADMIN).json()
        assert first == second
        assert first["label"] == "fastapi"

        labels = [t["label"] for t in client.get("/api/v1/tags", headers=USER).json()]
        assert labels == ["fastapi"]
