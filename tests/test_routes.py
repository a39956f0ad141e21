"""
Unit tests for API routes
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from enterprise_auth.exceptions import IdentityProviderError
from enterprise_auth.main import app
from enterprise_auth.services.auth_service import AuthService
from enterprise_auth.utils.dependencies import get_service


@pytest.fixture
def service():
    """Mock AuthService injected into the routes"""
    service = MagicMock()
    app.dependency_overrides[get_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def client(service):
    return TestClient(app)


class TestHealthRoutes:
    """Test health endpoints"""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_identity_health_unconfigured(self, client, service):
        service.identity.is_available.return_value = False

        response = client.get("/health/identity")

        assert response.status_code == 503
        assert response.json()["error"] is True

    def test_identity_health_configured(self, client, service):
        service.identity.is_available.return_value = True
        service.identity.is_admin_available.return_value = True

        response = client.get("/health/identity")

        assert response.status_code == 200


class TestAuthRoutes:
    """Test /auth endpoints"""

    def test_login_success(self, client, service):
        service.login = AsyncMock(return_value={
            "success": True,
            "user": {"id": "user-123", "role_key": "ADMIN", "is_authenticated": True},
            "session": {"access_token": "access-token", "refresh_token": "refresh-token"}
        })

        response = client.post("/auth/login", json={"email": " a@x.com ", "password": "good"})

        assert response.status_code == 200
        assert response.json()["user"]["role_key"] == "ADMIN"
        service.login.assert_awaited_once_with("a@x.com", "good")

    @pytest.mark.parametrize("error_code,status_code", [
        ("INVALID_CREDENTIALS", 401),
        ("ACCOUNT_NOT_APPROVED", 403),
        ("PROFILE_NOT_FOUND", 404),
        ("SERVER_ERROR", 500),
        ("UNKNOWN_ERROR", 500),
    ])
    def test_login_failure_status(self, client, service, error_code, status_code):
        service.login = AsyncMock(return_value={
            "success": False, "error": "failed", "error_code": error_code
        })

        response = client.post("/auth/login", json={"email": "a@x.com", "password": "bad"})

        assert response.status_code == status_code
        assert response.json()["error_code"] == error_code

    def test_login_not_approved_carries_status(self, client, service):
        service.login = AsyncMock(return_value={
            "success": False,
            "error": "Your account is not approved yet.",
            "error_code": "ACCOUNT_NOT_APPROVED",
            "status": "PENDING"
        })

        response = client.post("/auth/login", json={"email": "a@x.com", "password": "good"})

        assert response.status_code == 403
        assert response.json()["status"] == "PENDING"

    def test_register_created(self, client, service):
        service.register = AsyncMock(return_value={
            "success": True,
            "message": "Registration successful. Please log in with your credentials.",
            "user": {"id": "new-user-456", "role": "STUDENT_L1"}
        })

        response = client.post("/auth/register", json={
            "email": "new@x.com", "password": "pw123456", "name": "Jane", "org_id": "org-1"
        })

        assert response.status_code == 201
        service.register.assert_awaited_once_with("new@x.com", "pw123456", "Jane", "org-1")

    @pytest.mark.parametrize("error_code,status_code", [
        ("MISSING_FIELDS", 400),
        ("USER_EXISTS", 409),
        ("AUTH_CREATE_FAILED", 502),
        ("MEMBERSHIP_CREATE_FAILED", 502),
    ])
    def test_register_failure_status(self, client, service, error_code, status_code):
        service.register = AsyncMock(return_value={
            "success": False, "error": "failed", "error_code": error_code
        })

        response = client.post("/auth/register", json={})

        assert response.status_code == status_code
        service.register.assert_awaited_once_with("", "", "", "")

    def test_password_reset(self, client, service):
        service.request_password_reset = AsyncMock(return_value={
            "success": True, "message": "Password reset email sent. Please check your inbox."
        })

        response = client.post("/auth/password-reset", json={"email": "a@x.com"})

        assert response.status_code == 200
        service.request_password_reset.assert_awaited_once_with("a@x.com")

    def test_password_reset_complete_passes_session_tokens(self, client, service):
        service.update_password_with_token = AsyncMock(return_value={
            "success": True, "message": "Password updated successfully."
        })

        response = client.post(
            "/auth/password-reset-complete",
            json={"new_password": "newpass1", "confirm_password": "newpass1"},
            headers={"Authorization": "Bearer access-token", "X-Refresh-Token": "refresh-token"}
        )

        assert response.status_code == 200
        service.update_password_with_token.assert_awaited_once_with(
            "newpass1", "newpass1", "access-token", "refresh-token"
        )

    def test_password_reset_complete_mismatch(self, client, service):
        service.update_password_with_token = AsyncMock(return_value={
            "success": False, "error": "Passwords do not match.", "error_code": "PASSWORD_MISMATCH"
        })

        response = client.post(
            "/auth/password-reset-complete",
            json={"new_password": "newpass1", "confirm_password": "newpass2"}
        )

        assert response.status_code == 400
        service.update_password_with_token.assert_awaited_once_with("newpass1", "newpass2", None, None)

    def test_logout(self, client, service):
        service.logout = AsyncMock(return_value={"success": True})

        response = client.post("/auth/logout", headers={"Authorization": "Bearer access-token"})

        assert response.status_code == 200
        service.logout.assert_awaited_once_with("access-token", None)

    def test_me_requires_session(self, client, service):
        service.get_session_user = AsyncMock(return_value={
            "success": False, "error": "Authentication required.", "error_code": "UNAUTHENTICATED"
        })

        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_me_returns_user(self, client, service):
        service.get_session_user = AsyncMock(return_value={
            "success": True, "user": {"id": "user-123", "email": "a@x.com"}
        })

        response = client.get("/auth/me", headers={"Authorization": "Bearer access-token"})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "a@x.com"
        service.get_session_user.assert_awaited_once_with("access-token")

    def test_me_provider_unreachable(self, client, service):
        service.get_session_user = AsyncMock(return_value={
            "success": False, "error": "An unexpected error occurred.", "error_code": "UNKNOWN_ERROR"
        })

        response = client.get("/auth/me", headers={"Authorization": "Bearer access-token"})

        assert response.status_code == 500
        assert response.json()["message"] == "Authentication failed"


class TestNullFields:
    """Null request fields reach AuthService and come back as coded results"""

    @pytest.fixture
    def client(self, mock_identity, mock_profiles, app_config):
        app.dependency_overrides[get_service] = lambda: AuthService(
            mock_identity, mock_profiles, app_config, audit=MagicMock()
        )
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_register_null_password(self, client, mock_identity):
        response = client.post("/auth/register", json={
            "email": "new@x.com", "password": None, "name": "Jane", "org_id": "org-1"
        })

        assert response.status_code == 400
        assert response.json()["error_code"] == "MISSING_FIELDS"
        mock_identity.create_account.assert_not_called()

    def test_password_reset_null_email(self, client, mock_identity):
        response = client.post("/auth/password-reset", json={"email": None})

        assert response.status_code == 400
        assert response.json()["error_code"] == "MISSING_EMAIL"
        mock_identity.send_password_reset_email.assert_not_called()

    def test_password_reset_complete_null_password(self, client, mock_identity):
        response = client.post(
            "/auth/password-reset-complete",
            json={"new_password": None, "confirm_password": None},
            headers={"Authorization": "Bearer access-token"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "MISSING_PASSWORD"
        mock_identity.restore_session.assert_not_called()

    def test_login_null_credentials(self, client, mock_identity):
        mock_identity.sign_in.side_effect = IdentityProviderError("Invalid login credentials", 400)

        response = client.post("/auth/login", json={"email": None, "password": None})

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"
        mock_identity.sign_in.assert_awaited_once_with(None, None)

    def test_me_provider_unreachable(self, client, mock_identity):
        mock_identity.get_user.side_effect = IdentityProviderError("Request timed out", 0)

        response = client.get("/auth/me", headers={"Authorization": "Bearer access-token"})

        assert response.status_code == 500
