"""
Supabase Client Configuration
Identity provider access for login, provisioning and password recovery
"""

import asyncio
from typing import Optional
import logging

from supabase import AuthError, AuthRetryableError, Client, ClientOptions, create_client

from enterprise_auth.exceptions import IdentityProviderError
from enterprise_auth.models.user import Account, AuthSession
from enterprise_auth.utils.config import AppConfig, get_app_config

logger = logging.getLogger(__name__)


def _client_options() -> ClientOptions:
    # Sessions live in the caller's tokens, never in process state.
    # Without the refresh timer nothing outside the request holds the client.
    return ClientOptions(persist_session=False, auto_refresh_token=False)


def _is_jwt_shaped(token: str) -> bool:
    """Check for three non-empty dot-separated segments"""
    parts = token.split(".")
    return len(parts) == 3 and all(parts)


class SupabaseClient:
    """
    Supabase client wrapper for authentication services

    Calls that create or consume a user session run on a fresh anon-key
    client so that concurrent requests never share session state. Admin
    calls (account creation/deletion) and profile store access use a single
    service-role client.
    """

    def __init__(self, config: Optional[AppConfig] = None):
        config = config or get_app_config()
        self.url: str = config.supabase_url
        self.key: str = config.supabase_anon_key
        self.service_key: str = config.supabase_service_key
        self.admin: Optional[Client] = None

        if self.url and self.service_key:
            try:
                self.admin = create_client(self.url, self.service_key, options=_client_options())
                logger.info("Supabase admin client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize Supabase admin client: {e}")
                self.admin = None

        if not (self.url and self.key):
            logger.warning("Supabase credentials not found in environment")

    def is_available(self) -> bool:
        """Check if the anon-key auth API is configured"""
        return bool(self.url and self.key)

    def is_admin_available(self) -> bool:
        """Check if elevated (service-role) access is configured"""
        return self.admin is not None

    def session_client(self) -> Client:
        """
        Create a fresh client for one request's session

        The client (and its HTTP connection pool) is owned by the request
        or by the AuthSession it is bound to. It is never cached here, and
        with auto refresh disabled it starts no timer, so it is released
        by garbage collection once the request drops its last reference.
        """
        if not self.is_available():
            raise IdentityProviderError("Supabase client not available")
        return create_client(self.url, self.key, options=_client_options())

    def _require_admin(self) -> Client:
        if self.admin is None:
            raise IdentityProviderError("Supabase admin client not available")
        return self.admin

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password

        Args:
            email: Account email
            password: Account password

        Returns:
            AuthSession: Session bound to its own client

        Raises:
            IdentityProviderError: If the credentials are rejected
        """
        client = self.session_client()
        try:
            response = await asyncio.to_thread(
                client.auth.sign_in_with_password,
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e

        if not response.user or not response.session:
            raise IdentityProviderError("Invalid credentials")

        logger.info(f"Account signed in: {email}")
        return AuthSession(
            account=Account(id=str(response.user.id), email=response.user.email),
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            expires_at=response.session.expires_at,
            client=client
        )

    async def restore_session(self, access_token: str, refresh_token: str) -> AuthSession:
        """
        Rebuild a session from tokens held by the caller

        Args:
            access_token: JWT access token
            refresh_token: Refresh token

        Returns:
            AuthSession: Session bound to its own client

        Raises:
            IdentityProviderError: If the tokens are malformed, expired or revoked
        """
        if not access_token or not _is_jwt_shaped(access_token):
            raise IdentityProviderError("Invalid session token")

        client = self.session_client()
        try:
            response = await asyncio.to_thread(client.auth.set_session, access_token, refresh_token)
        except AuthError as e:
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e
        except (IndexError, ValueError) as e:
            # The SDK decodes the token payload locally before any request
            raise IdentityProviderError("Invalid session token") from e

        if not response.user or not response.session:
            raise IdentityProviderError("Auth session missing")

        return AuthSession(
            account=Account(id=str(response.user.id), email=response.user.email),
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            expires_at=response.session.expires_at,
            client=client
        )

    async def sign_out(self, session: AuthSession):
        """Invalidate a session at the identity provider"""
        if session.client is None:
            raise IdentityProviderError("Session is not bound to a client")
        try:
            await asyncio.to_thread(session.client.auth.sign_out)
        except AuthError as e:
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e
        logger.info(f"Session signed out for account: {session.account.id}")

    async def create_account(self, email: str, password: str, email_confirm: bool = False) -> Account:
        """
        Create an identity provider account through the admin API

        Args:
            email: Account email
            password: Account password
            email_confirm: Mark the email as confirmed

        Returns:
            Account: The created account
        """
        admin = self._require_admin()
        try:
            response = await asyncio.to_thread(
                admin.auth.admin.create_user,
                {"email": email, "password": password, "email_confirm": email_confirm}
            )
        except AuthError as e:
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e

        if not response or not response.user:
            raise IdentityProviderError("Failed to create authentication user.")

        logger.info(f"Account created: {email} ({response.user.id})")
        return Account(id=str(response.user.id), email=response.user.email)

    async def delete_account(self, account_id: str):
        """Delete an identity provider account through the admin API"""
        admin = self._require_admin()
        try:
            await asyncio.to_thread(admin.auth.admin.delete_user, account_id)
        except AuthError as e:
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e
        logger.info(f"Account deleted: {account_id}")

    async def send_password_reset_email(self, email: str, redirect_to: str):
        """
        Send the recovery email

        Args:
            email: Account email
            redirect_to: URL the recovery link lands on
        """
        client = self.session_client()
        try:
            await asyncio.to_thread(
                client.auth.reset_password_for_email,
                email,
                {"redirect_to": redirect_to}
            )
        except AuthError as e:
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e
        logger.info(f"Password reset email requested for: {email}")

    async def update_session_password(self, session: AuthSession, new_password: str):
        """Set a new password for the account owning the session"""
        if session.client is None:
            raise IdentityProviderError("Session is not bound to a client")
        try:
            response = await asyncio.to_thread(
                session.client.auth.update_user,
                {"password": new_password}
            )
        except AuthError as e:
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e

        if not response or not response.user:
            raise IdentityProviderError("Failed to update password.")
        logger.info(f"Password updated for account: {session.account.id}")

    async def get_user(self, access_token: str) -> Optional[Account]:
        """
        Resolve an access token to its account

        Args:
            access_token: JWT access token

        Returns:
            Account or None if the token is rejected

        Raises:
            IdentityProviderError: If the provider could not be reached
        """
        client = self.session_client()
        try:
            response = await asyncio.to_thread(client.auth.get_user, access_token)
        except AuthRetryableError as e:
            # Timeouts and network failures are not a verdict on the token
            raise IdentityProviderError(e.message, getattr(e, 'status', None)) from e
        except AuthError as e:
            logger.info(f"Access token rejected: {e.message}")
            return None

        if not response or not response.user:
            return None
        return Account(id=str(response.user.id), email=response.user.email)


_supabase_client: Optional[SupabaseClient] = None


def get_supabase_client() -> SupabaseClient:
    """Get Supabase client instance"""
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = SupabaseClient()
    return _supabase_client
