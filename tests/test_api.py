from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from credential_service.api import routes
from credential_service.config import Settings, get_settings
from credential_service.domain.account import Account
from credential_service.domain.service import Authenticator
from credential_service.main import create_app
from credential_service.security.passwords import PasswordHasher


class FailingStore:
    """Store whose lookups always fail, mimicking an unavailable database."""

    async def find_by_email(self, email: str) -> Account | None:
        raise ConnectionError("connection refused")

    async def create(self, email: str, password: str) -> Account:
        raise ConnectionError("connection refused")


@pytest.fixture
def api_client():
    """Provide a test client backed by a seeded in-memory store."""
    settings = Settings(store_backend="memory", seed_demo_accounts=True, password_hash_rounds=4)
    with TestClient(create_app(settings)) as client:
        yield client


def _failing_client(environment: str) -> TestClient:
    app = FastAPI()
    app.include_router(routes.router)
    app.state.authenticator = Authenticator(FailingStore(), PasswordHasher(rounds=4))
    app.dependency_overrides[get_settings] = lambda: Settings(environment=environment)
    return TestClient(app)


def test_login_succeeds_for_seeded_admin(api_client):
    response = api_client.post(
        "/v1/login", json={"email": "admin@example.com", "password": "admin123"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Login successful"
    assert data["user"]["email"] == "admin@example.com"
    assert isinstance(data["user"]["id"], int)
    assert data["user"]["created_at"].startswith("20")
    assert "password_hash" not in response.text


def test_login_trims_email(api_client):
    response = api_client.post(
        "/v1/login", json={"email": "  admin@example.com  ", "password": "admin123"}
    )
    assert response.status_code == 200


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "admin@example.com", "password": "wrong"},
        {"email": "nonexistent@example.com", "password": "password123"},
    ],
)
def test_invalid_credentials_return_401(api_client, payload):
    response = api_client.post("/v1/login", json=payload)
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid email or password"}


@pytest.mark.parametrize(
    "payload,message",
    [
        ({"email": "", "password": ""}, "Email and password are required"),
        ({"email": "test@example.com"}, "Email and password are required"),
        ({"password": "password123"}, "Email and password are required"),
        ({"email": 123, "password": "password123"}, "Email and password must be strings"),
        ({"email": "   ", "password": "password123"}, "Email and password cannot be empty"),
    ],
)
def test_validation_errors_return_400(api_client, payload, message):
    response = api_client.post("/v1/login", json=payload)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": message}


@pytest.mark.parametrize("body", ["not json", "[1, 2]", '"text"', ""])
def test_malformed_body_returns_400(api_client, body):
    response = api_client.post(
        "/v1/login", content=body, headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request body"


def test_internal_error_hides_detail_outside_development():
    with _failing_client("production") as client:
        response = client.post("/v1/login", json={"email": "a@example.com", "password": "pw"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


def test_internal_error_includes_detail_in_development():
    with _failing_client("development") as client:
        response = client.post("/v1/login", json={"email": "a@example.com", "password": "pw"})
    assert response.status_code == 500
    data = response.json()
    assert data["message"] == "Internal server error"
    assert data["error"] == "connection refused"


def test_healthz_and_metrics(api_client):
    assert api_client.get("/healthz").json() == {"status": "ok"}
    api_client.post("/v1/login", json={"email": "admin@example.com", "password": "admin123"})
    metrics = api_client.get("/metrics")
    assert metrics.status_code == 200
    assert "credential_login_attempts_total" in metrics.text



def test_unknown_store_backend_fails_startup():
    app = create_app(Settings(store_backend="bogus"))
    with pytest.raises(ValueError, match="unknown store backend"):
        with TestClient(app):
            pass
