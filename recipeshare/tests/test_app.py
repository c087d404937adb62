from __future__ import annotations

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from recipeshare.app import create_app, open_database
from recipeshare.config import Settings
from recipeshare.recipes.service import RecipeService
from recipeshare.storage.memory import InMemoryDatabase


def _auth_headers(c) -> dict[str, str]:
    resp = c.post(
        "/api/register",
        json={"name": "Alice", "email": "alice@example.com", "password": "pw"},
    )
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def test_health_is_public(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_cors_headers(client):
    resp = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["access-control-allow-origin"] == "*"


def test_unhandled_error_returns_500(settings, database):
    app = create_app(settings, database=database)
    with TestClient(app, raise_server_exceptions=False) as c:
        headers = _auth_headers(c)
        with patch.object(RecipeService, "list_recipes", side_effect=RuntimeError("boom")):
            resp = c.get("/api/recipes", headers=headers)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}


def test_database_closed_on_shutdown(settings):
    database = MagicMock()
    with TestClient(create_app(settings, database=database)):
        database.close.assert_not_called()
    database.close.assert_called_once()


def test_open_database_defaults_to_memory():
    assert isinstance(open_database(Settings(db_url="")), InMemoryDatabase)


@patch("recipeshare.app.MongoDatabase")
def test_open_database_uses_mongo_when_configured(mock_mongo_cls):
    database = open_database(Settings(db_url="mongodb://db:27017", db_name="cookbook"))
    mock_mongo_cls.assert_called_once_with("mongodb://db:27017", "cookbook")
    assert database is mock_mongo_cls.return_value
    database.ping.assert_called_once()
    database.ensure_indexes.assert_called_once()


def test_strict_rating_policy_from_settings(settings):
    strict = Settings(
        db_url="",
        jwt_secret=settings.jwt_secret,
        bcrypt_rounds=4,
        strict_rating_votes=True,
    )
    with TestClient(create_app(strict, database=InMemoryDatabase())) as c:
        alice = _auth_headers(c)
        bob_token = c.post(
            "/api/register",
            json={"name": "Bob", "email": "bob@example.com", "password": "pw"},
        ).json()["token"]
        bob = {"Authorization": f"Bearer {bob_token}"}
        recipe = c.post(
            "/api/recipes",
            json={"title": "T", "description": "D", "ingredients": [], "instructions": []},
            headers=alice,
        ).json()
        url = f"/api/recipes/{recipe['id']}/rate"
        assert c.post(url, json={"rating": 0}, headers=bob).status_code == 200
        assert c.post(url, json={"rating": 3}, headers=bob).status_code == 400
