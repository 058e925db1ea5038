"""
tests/test_user_routes.py -- Integration tests for /api/users routes.

Coverage:
  - Auth failures: 401 on every route without a token
  - List, detail, update, delete happy paths
  - 404 for absent ids on detail, update, delete
  - 400 when an update takes another user's email
  - Delete is permanent: a second GET is 404
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient


def _register(client: TestClient, name: str, email: str, password: str = "secret123") -> dict:
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestUserRoutesAuthFailure:
    """Unauthenticated requests to protected user routes must return 401."""

    @pytest.mark.parametrize(
        "method,path",
        [("get", "/api/users"), ("get", "/api/users/1"), ("delete", "/api/users/1")],
    )
    def test_requires_token(self, api_client: tuple[TestClient, str, int], method: str, path: str) -> None:
        client, _token, _uid = api_client
        resp = getattr(client, method)(path)
        assert resp.status_code == 401
        assert resp.json() == {"ok": False, "message": "Token no proporcionado"}

    def test_put_requires_token(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.put("/api/users/1", json={"name": "x", "email": "x@x.com"})
        assert resp.status_code == 401


class TestUserRoutes:
    def test_list_users(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, uid = api_client
        resp = client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert isinstance(body["data"], list)
        assert {"id": uid, "name": "Test Admin", "email": "admin@example.com"} in body["data"]
        for user in body["data"]:
            assert set(user) == {"id", "name", "email"}

    def test_get_user(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, uid = api_client
        resp = client.get(f"/api/users/{uid}", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["data"]["email"] == "admin@example.com"

    def test_get_user_not_found(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        resp = client.get("/api/users/999", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 404
        assert resp.json() == {"ok": False, "message": "Usuario no encontrado"}

    def test_non_integer_id_is_validation_error(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        resp = client.get("/api/users/abc", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 422

    def test_update_user(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        headers = {"Authorization": f"Bearer {token}"}
        created = _register(client, "Carla", "carla@x.com")
        resp = client.put(
            f"/api/users/{created['id']}",
            json={"name": "Carla R.", "email": "carla.r@x.com"},
            headers=headers,
        )
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"ok": True, "data": {"id": created["id"], "name": "Carla R.", "email": "carla.r@x.com"}}

        fetched = client.get(f"/api/users/{created['id']}", headers=headers).json()["data"]
        assert fetched["email"] == "carla.r@x.com"

    def test_update_requires_both_fields(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, uid = api_client
        resp = client.put(f"/api/users/{uid}", json={"name": "Only Name"}, headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 422

    def test_update_not_found(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        resp = client.put(
            "/api/users/999",
            json={"name": "Ghost", "email": "ghost@x.com"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 404
        assert resp.json()["message"] == "Usuario no encontrado"

    def test_update_to_taken_email_is_conflict(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        created = _register(client, "Dani", "dani@x.com")
        resp = client.put(
            f"/api/users/{created['id']}",
            json={"name": "Dani", "email": "admin@example.com"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"ok": False, "message": "El email ya está registrado"}

    def test_delete_user_is_permanent(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        headers = {"Authorization": f"Bearer {token}"}
        created = _register(client, "Eva", "eva@x.com")

        resp = client.delete(f"/api/users/{created['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "message": "Usuario eliminado"}

        again = client.get(f"/api/users/{created['id']}", headers=headers)
        assert again.status_code == 404

        # The email is free again after a hard delete.
        _register(client, "Eva", "eva@x.com")

    def test_delete_not_found(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        resp = client.delete("/api/users/999", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 404
        assert resp.json()["message"] == "Usuario no encontrado"
