"""
User Models
Model definitions for accounts, profiles, memberships and sessions
"""

from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from enum import Enum

# Role key reported when a profile has no membership
PENDING_ROLE_KEY = "pending_approval"


class AccountStatus(str, Enum):
    """Profile approval status"""
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"


class Role(str, Enum):
    """Membership role keys known to the service"""
    ADMIN = "ADMIN"
    STUDENT_L1 = "STUDENT_L1"


class ErrorCode(str, Enum):
    """Error codes returned in operation results"""
    MISSING_FIELDS = "MISSING_FIELDS"
    MISSING_EMAIL = "MISSING_EMAIL"
    MISSING_PASSWORD = "MISSING_PASSWORD"
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"
    PASSWORD_TOO_SHORT = "PASSWORD_TOO_SHORT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    SESSION_REQUIRED = "SESSION_REQUIRED"
    ACCOUNT_NOT_APPROVED = "ACCOUNT_NOT_APPROVED"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    USER_EXISTS = "USER_EXISTS"
    AUTH_CREATE_FAILED = "AUTH_CREATE_FAILED"
    PROFILE_CREATE_FAILED = "PROFILE_CREATE_FAILED"
    MEMBERSHIP_CREATE_FAILED = "MEMBERSHIP_CREATE_FAILED"
    RESET_REQUEST_FAILED = "RESET_REQUEST_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class Account:
    """Identity provider account"""
    id: str
    email: str


@dataclass
class AuthSession:
    """
    Identity provider session bound to a per-request client

    The client carries the session state, so sign-out and password
    updates must go through the same instance.
    """
    account: Account
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None
    client: Any = field(default=None, repr=False)

    def tokens(self) -> Dict[str, Any]:
        """Session tokens handed back to the caller"""
        return {
            'access_token': self.access_token,
            'refresh_token': self.refresh_token,
            'expires_at': self.expires_at,
            'token_type': 'bearer'
        }


@dataclass
class Membership:
    """Organization membership row with its joined role"""
    org_id: Optional[str]
    role: Optional[str]
    is_primary: bool = False
    role_key: Optional[str] = None
    role_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Membership":
        joined = row.get('roles') or {}
        return cls(
            org_id=row.get('org_id'),
            role=row.get('role'),
            is_primary=bool(row.get('is_primary')),
            role_key=joined.get('role_key'),
            role_name=joined.get('role_name')
        )

    @property
    def effective_role_key(self) -> str:
        return self.role_key or self.role or PENDING_ROLE_KEY


@dataclass
class Profile:
    """user_profiles row with embedded memberships"""
    id: str
    email: str
    full_name: Optional[str]
    org_id: Optional[str]
    account_status: Optional[str]
    memberships: List[Membership] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            id=row['id'],
            email=row.get('email'),
            full_name=row.get('full_name'),
            org_id=row.get('org_id'),
            account_status=row.get('account_status'),
            memberships=[Membership.from_row(m) for m in row.get('memberships') or []]
        )

    @property
    def is_approved(self) -> bool:
        return self.account_status == AccountStatus.APPROVED.value

    @property
    def primary_membership(self) -> Optional[Membership]:
        return select_primary_membership(self.memberships)


def select_primary_membership(memberships: List[Membership]) -> Optional[Membership]:
    """
    Pick the membership that defines the session role

    The row flagged is_primary wins. PostgREST gives no ordering for
    embedded rows, so without a flagged row the first one returned is used.

    Args:
        memberships: Memberships embedded in a profile

    Returns:
        Membership or None if the profile has none
    """
    for membership in memberships:
        if membership.is_primary:
            return membership
    return memberships[0] if memberships else None
