"""
Service Exceptions
Errors raised by the identity provider and profile store adapters
"""

from typing import Optional


class IdentityProviderError(Exception):
    """Raised when a Supabase Auth call fails or is unavailable"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class StoreError(Exception):
    """Raised when a user_profiles / memberships operation fails"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class UniqueViolationError(StoreError):
    """Raised when an insert hits a unique constraint (Postgres 23505)"""
