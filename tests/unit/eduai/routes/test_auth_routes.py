import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from eduai.main import app
from eduai.services.auth_service import (
    AuthConfigurationError,
    AuthenticationError,
    AuthErrorKind,
    get_auth_service,
)

client = TestClient(app)


@pytest.fixture
def auth_service():
    service = MagicMock()
    app.dependency_overrides[get_auth_service] = lambda: service
    yield service
    app.dependency_overrides = {}


def test_login_success(auth_service):
    auth_service.login.return_value = {
        "idToken": "id",
        "accessToken": "access",
        "refreshToken": "refresh",
        "expiresIn": 3600,
        "email": "a@b.com",
    }

    resp = client.post("/api/auth/login", json={"email": "a@b.com", "password": "pw"})

    assert resp.status_code == 200
    assert resp.json()["accessToken"] == "access"
    auth_service.login.assert_called_once_with("a@b.com", "pw")


def test_login_missing_password(auth_service):
    resp = client.post("/api/auth/login", json={"email": "a@b.com"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email and password are required"
    auth_service.login.assert_not_called()


@pytest.mark.parametrize("kind,message", [
    (AuthErrorKind.INVALID_CREDENTIALS, "Invalid email or password"),
    (AuthErrorKind.USER_NOT_FOUND, "User not found"),
    (AuthErrorKind.UNKNOWN, "Authentication failed"),
])
def test_login_rejected(auth_service, kind, message):
    auth_service.login.side_effect = AuthenticationError(kind)

    resp = client.post("/api/auth/login", json={"email": "a@b.com", "password": "bad"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == message


def test_login_without_client_id(auth_service):
    auth_service.login.side_effect = AuthConfigurationError("Missing COGNITO_CLIENT_ID environment variable")

    resp = client.post("/api/auth/login", json={"email": "a@b.com", "password": "pw"})

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Server configuration error"
