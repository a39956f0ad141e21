"""
Pytest fixtures for auth service tests
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from typing import Dict, Any

from enterprise_auth.models.user import Account, AuthSession
from enterprise_auth.services.auth_service import AuthService
from enterprise_auth.utils.config import AppConfig


@pytest.fixture
def app_config() -> AppConfig:
    """Configuration with Supabase credentials and an admin allow-list"""
    return AppConfig(
        _env_file=None,
        supabase_url="https://project.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_key="service-key",
        site_url="https://app.example.com",
        admin_emails="Boss@Example.com, root@example.com"
    )


@pytest.fixture
def auth_session() -> AuthSession:
    """Signed-in session for a@x.com"""
    return AuthSession(
        account=Account(id="user-123", email="a@x.com"),
        access_token="access-token",
        refresh_token="refresh-token",
        expires_at=1900000000,
        client=MagicMock()
    )


@pytest.fixture
def mock_identity(auth_session):
    """Mock Supabase identity provider"""
    identity = MagicMock()
    identity.is_available.return_value = True
    identity.is_admin_available.return_value = True
    identity.sign_in = AsyncMock(return_value=auth_session)
    identity.sign_out = AsyncMock()
    identity.restore_session = AsyncMock(return_value=auth_session)
    identity.create_account = AsyncMock(return_value=Account(id="new-user-456", email="new@x.com"))
    identity.delete_account = AsyncMock()
    identity.send_password_reset_email = AsyncMock()
    identity.update_session_password = AsyncMock()
    identity.get_user = AsyncMock(return_value=Account(id="user-123", email="a@x.com"))
    return identity


@pytest.fixture
def mock_profiles():
    """Mock profile store; inserts echo the inserted row"""
    profiles = MagicMock()
    profiles.find_profile_with_memberships = AsyncMock(return_value=None)
    profiles.find_profile_by_email = AsyncMock(return_value=None)
    profiles.insert_profile = AsyncMock(side_effect=lambda data: dict(data))
    profiles.insert_membership = AsyncMock()
    profiles.delete_profile = AsyncMock()
    return profiles


@pytest.fixture
def auth_service(mock_identity, mock_profiles, app_config) -> AuthService:
    """AuthService wired to mocks"""
    return AuthService(mock_identity, mock_profiles, app_config, audit=MagicMock())


@pytest.fixture
def approved_profile_row() -> Dict[str, Any]:
    """Approved profile with one ADMIN membership, as returned by PostgREST"""
    return {
        "id": "user-123",
        "email": "a@x.com",
        "full_name": "Alice",
        "org_id": "org-1",
        "account_status": "APPROVED",
        "memberships": [
            {
                "user_id": "user-123",
                "org_id": "org-1",
                "role": "ADMIN",
                "is_primary": True,
                "roles": {"role_key": "ADMIN", "role_name": "Administrator"}
            }
        ]
    }
