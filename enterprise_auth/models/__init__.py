"""
Auth service data models
"""

from .user import (
    Account, AccountStatus, AuthSession, ErrorCode, Membership, Profile,
    Role, PENDING_ROLE_KEY, select_primary_membership
)
