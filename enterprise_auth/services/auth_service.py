"""
Authentication Service
Account provisioning and login authorization business logic
"""

from typing import Any, Dict, Optional
import logging

from enterprise_auth.exceptions import IdentityProviderError, StoreError, UniqueViolationError
from enterprise_auth.models.user import (
    AuthSession, ErrorCode, PENDING_ROLE_KEY, Profile, Role
)
from enterprise_auth.utils.config import AppConfig, get_app_config
from enterprise_auth.utils.database import ProfileDatabase
from enterprise_auth.utils.logger import AuditLogger, get_audit_logger
from enterprise_auth.utils.supabase_client import SupabaseClient, get_supabase_client

logger = logging.getLogger(__name__)


def _failure(error_code: ErrorCode, error: str, **extra) -> Dict[str, Any]:
    return {
        'success': False,
        'error': error,
        'error_code': error_code.value,
        **extra
    }


class AuthService:
    """
    Login, registration and password recovery workflow

    Every public method returns a result dict of the form
    {'success': bool, 'error': str, 'error_code': str, ...} and never raises.
    """

    def __init__(
        self,
        identity: SupabaseClient,
        profiles: Optional[ProfileDatabase],
        config: AppConfig,
        audit: Optional[AuditLogger] = None
    ):
        self.identity = identity
        # None when the service-role key is not configured
        self.profiles = profiles
        self.config = config
        self.audit = audit or get_audit_logger()

    def resolve_role(self, email: str) -> str:
        """Role assigned to a newly registered email"""
        if str(email).strip().lower() in self.config.admin_email_set:
            return Role.ADMIN.value
        return self.config.default_role

    async def _end_session(self, session: AuthSession):
        """Best-effort sign-out of a session that must not stay live"""
        try:
            await self.identity.sign_out(session)
        except Exception as e:
            logger.warning(f"Failed to sign out session for account {session.account.id}: {e}")

    async def _delete_account(self, account_id: str):
        try:
            await self.identity.delete_account(account_id)
            logger.info(f"Rolled back account {account_id}")
        except Exception as e:
            logger.error(f"Failed to roll back account {account_id}: {e}")

    async def _delete_profile(self, profile_id: str):
        try:
            await self.profiles.delete_profile(profile_id)
            logger.info(f"Rolled back profile {profile_id}")
        except Exception as e:
            logger.error(f"Failed to roll back profile {profile_id}: {e}")

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate and authorize a user

        Args:
            email: Account email
            password: Account password

        Returns:
            dict: Login result with user payload and session tokens
        """
        try:
            if not self.identity.is_available():
                return _failure(ErrorCode.SERVER_ERROR, "Server configuration error")

            # 1. Check credentials with the identity provider
            try:
                session = await self.identity.sign_in(email, password)
            except IdentityProviderError as e:
                logger.info(f"Sign in rejected for {email}: {e.message}")
                self.audit.log_auth_event('login', email=email, outcome='failure',
                                          error_code=ErrorCode.INVALID_CREDENTIALS.value)
                return _failure(ErrorCode.INVALID_CREDENTIALS, "Invalid email or password.")

            # 2. Elevated store access is required to read the profile
            if self.profiles is None:
                await self._end_session(session)
                return _failure(ErrorCode.SERVER_ERROR, "Server configuration error")

            # 3. Fetch profile with memberships and roles
            try:
                row = await self.profiles.find_profile_with_memberships(session.account.id)
            except StoreError as e:
                logger.error(f"Profile lookup failed for account {session.account.id}: {e.message}")
                row = None

            if not row:
                await self._end_session(session)
                self.audit.log_auth_event('login', email=email, user_id=session.account.id,
                                          outcome='failure',
                                          error_code=ErrorCode.PROFILE_NOT_FOUND.value)
                return _failure(ErrorCode.PROFILE_NOT_FOUND, "User profile not found.")

            # 4. Extract role information
            profile = Profile.from_row(row)
            primary = profile.primary_membership
            role_key = primary.effective_role_key if primary else PENDING_ROLE_KEY

            # 5. Check account approval status
            if not profile.is_approved:
                await self._end_session(session)
                self.audit.log_auth_event('login', email=email, user_id=profile.id,
                                          outcome='failure',
                                          error_code=ErrorCode.ACCOUNT_NOT_APPROVED.value,
                                          details={'status': profile.account_status})
                return _failure(
                    ErrorCode.ACCOUNT_NOT_APPROVED,
                    "Your account is not approved yet. Please wait for administrator approval.",
                    status=profile.account_status
                )

            self.audit.log_auth_event('login', email=email, user_id=profile.id)
            return {
                'success': True,
                'user': {
                    'id': profile.id,
                    'email': profile.email,
                    'name': profile.full_name,
                    'role_key': role_key,
                    'org_id': primary.org_id if primary else None,
                    'account_status': profile.account_status,
                    'is_authenticated': True
                },
                'session': session.tokens()
            }

        except Exception:
            logger.exception("Login error")
            return _failure(ErrorCode.UNKNOWN_ERROR, "An unexpected error occurred during login.")

    async def register(self, email: str, password: str, name: str, org_id: str) -> Dict[str, Any]:
        """
        Register a new user

        Creates the identity provider account, the profile and the primary
        membership. A failure after the account exists rolls back whatever
        was created.

        Args:
            email: Account email
            password: Account password
            name: Full name
            org_id: Organization to join

        Returns:
            dict: Registration result with user summary
        """
        try:
            # 1. Validate inputs
            if not email or not password or not name or not org_id:
                return _failure(ErrorCode.MISSING_FIELDS, "All fields are required.")

            if self.profiles is None:
                return _failure(ErrorCode.SERVER_ERROR, "Server configuration error")

            # 2. Fast-path existence check; the unique constraint is authoritative
            try:
                existing = await self.profiles.find_profile_by_email(email)
            except StoreError as e:
                logger.warning(f"Existing profile check failed for {email}: {e.message}")
                existing = None

            if existing:
                self.audit.log_auth_event('register', email=email, outcome='failure',
                                          error_code=ErrorCode.USER_EXISTS.value)
                return _failure(ErrorCode.USER_EXISTS, "User with this email already exists.")

            # 3. Create authentication user
            try:
                account = await self.identity.create_account(email, password, email_confirm=False)
            except IdentityProviderError as e:
                logger.error(f"Account creation failed for {email}: {e.message}")
                return _failure(
                    ErrorCode.AUTH_CREATE_FAILED,
                    e.message or "Failed to create authentication user."
                )

            # 4. Create profile
            try:
                profile_row = await self.profiles.insert_profile({
                    'id': account.id,
                    'email': email,
                    'full_name': name,
                    'org_id': org_id,
                    'account_status': self.config.initial_account_status
                })
            except UniqueViolationError:
                logger.warning(f"Profile for {email} already exists, removing new account {account.id}")
                await self._delete_account(account.id)
                return _failure(ErrorCode.USER_EXISTS, "User with this email already exists.")
            except StoreError as e:
                logger.error(f"Profile creation failed for {email}: {e.message}")
                await self._delete_account(account.id)
                self.audit.log_auth_event('register', email=email, user_id=account.id,
                                          outcome='failure',
                                          error_code=ErrorCode.PROFILE_CREATE_FAILED.value)
                return _failure(ErrorCode.PROFILE_CREATE_FAILED, "Failed to create user profile.")

            # 5. Create primary membership
            role = self.resolve_role(email)
            try:
                await self.profiles.insert_membership({
                    'user_id': account.id,
                    'org_id': org_id,
                    'role': role,
                    'is_primary': True
                })
            except StoreError as e:
                logger.error(f"Membership creation failed for {email}: {e.message}")
                await self._delete_profile(account.id)
                await self._delete_account(account.id)
                self.audit.log_auth_event('register', email=email, user_id=account.id,
                                          outcome='failure',
                                          error_code=ErrorCode.MEMBERSHIP_CREATE_FAILED.value)
                return _failure(ErrorCode.MEMBERSHIP_CREATE_FAILED, "Failed to create membership.")

            self.audit.log_auth_event('register', email=email, user_id=account.id,
                                      details={'role': role, 'org_id': org_id})
            return {
                'success': True,
                'message': "Registration successful. Please log in with your credentials.",
                'user': {
                    'id': profile_row.get('id', account.id),
                    'email': profile_row.get('email', email),
                    'name': profile_row.get('full_name', name),
                    'role': role,
                    'org_id': org_id,
                    'account_status': profile_row.get(
                        'account_status', self.config.initial_account_status
                    )
                }
            }

        except Exception:
            logger.exception("Registration error")
            return _failure(
                ErrorCode.UNKNOWN_ERROR,
                "An unexpected error occurred during registration."
            )

    async def request_password_reset(self, email: str) -> Dict[str, Any]:
        """
        Send a password reset link

        Args:
            email: Account email

        Returns:
            dict: Reset request result
        """
        try:
            if not email:
                return _failure(ErrorCode.MISSING_EMAIL, "Email is required.")

            try:
                await self.identity.send_password_reset_email(
                    email, self.config.password_reset_redirect_url
                )
            except IdentityProviderError as e:
                logger.error(f"Password reset request failed for {email}: {e.message}")
                return _failure(
                    ErrorCode.RESET_REQUEST_FAILED,
                    e.message or "Failed to send reset email."
                )

            self.audit.log_auth_event('password_reset_request', email=email)
            return {
                'success': True,
                'message': "Password reset email sent. Please check your inbox."
            }

        except Exception:
            logger.exception("Password reset request error")
            return _failure(ErrorCode.UNKNOWN_ERROR, "An unexpected error occurred.")

    async def update_password_with_token(
        self,
        new_password: str,
        confirm_password: str,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Set a new password inside a recovery session

        The recovery session comes from the emailed reset link; its tokens
        must be passed in, the call is not valid without them.

        Args:
            new_password: New password
            confirm_password: Repeated new password
            access_token: Recovery session access token
            refresh_token: Recovery session refresh token

        Returns:
            dict: Update result
        """
        try:
            if not new_password or not confirm_password:
                return _failure(ErrorCode.MISSING_PASSWORD, "Both password fields are required.")

            if new_password != confirm_password:
                return _failure(ErrorCode.PASSWORD_MISMATCH, "Passwords do not match.")

            if len(new_password) < self.config.min_password_length:
                return _failure(
                    ErrorCode.PASSWORD_TOO_SHORT,
                    f"Password must be at least {self.config.min_password_length} characters long."
                )

            if not access_token:
                return _failure(
                    ErrorCode.SESSION_REQUIRED,
                    "Your password reset link has expired or is invalid."
                )

            try:
                session = await self.identity.restore_session(access_token, refresh_token or "")
            except IdentityProviderError as e:
                logger.info(f"Recovery session rejected: {e.message}")
                return _failure(
                    ErrorCode.SESSION_REQUIRED,
                    "Your password reset link has expired or is invalid."
                )

            try:
                await self.identity.update_session_password(session, new_password)
            except IdentityProviderError as e:
                logger.error(f"Password update failed for account {session.account.id}: {e.message}")
                return _failure(ErrorCode.UPDATE_FAILED, e.message or "Failed to update password.")

            self.audit.log_auth_event('password_update', email=session.account.email,
                                      user_id=session.account.id)
            return {
                'success': True,
                'message': "Password updated successfully."
            }

        except Exception:
            logger.exception("Password update error")
            return _failure(ErrorCode.UNKNOWN_ERROR, "An unexpected error occurred.")

    async def logout(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Sign out a session

        Args:
            access_token: Session access token
            refresh_token: Session refresh token

        Returns:
            dict: Logout result
        """
        try:
            if not access_token:
                return {'success': True}

            try:
                session = await self.identity.restore_session(access_token, refresh_token or "")
            except IdentityProviderError as e:
                logger.info(f"Session already ended at logout: {e.message}")
                return {'success': True}

            await self.identity.sign_out(session)
            self.audit.log_auth_event('logout', email=session.account.email,
                                      user_id=session.account.id)
            return {'success': True}

        except Exception as e:
            logger.error(f"Logout error: {e}")
            return _failure(ErrorCode.UNKNOWN_ERROR, "Failed to logout.")

    async def get_session_user(self, access_token: Optional[str]) -> Dict[str, Any]:
        """
        Resolve the user behind an access token

        Args:
            access_token: Session access token

        Returns:
            dict: {'success': True, 'user': {'id', 'email'}} or UNAUTHENTICATED
        """
        try:
            if not access_token:
                return _failure(ErrorCode.UNAUTHENTICATED, "Authentication required.")

            account = await self.identity.get_user(access_token)
            if not account:
                return _failure(ErrorCode.UNAUTHENTICATED, "Invalid or expired session.")

            return {
                'success': True,
                'user': {'id': account.id, 'email': account.email}
            }

        except Exception:
            logger.exception("Session lookup error")
            return _failure(ErrorCode.UNKNOWN_ERROR, "An unexpected error occurred.")


def build_auth_service(
    config: Optional[AppConfig] = None,
    identity: Optional[SupabaseClient] = None
) -> AuthService:
    """Wire an AuthService from configuration"""
    config = config or get_app_config()
    identity = identity or get_supabase_client()
    profiles = ProfileDatabase(identity.admin) if identity.is_admin_available() else None
    return AuthService(identity, profiles, config)


_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get auth service instance"""
    global _auth_service
    if _auth_service is None:
        _auth_service = build_auth_service()
    return _auth_service
