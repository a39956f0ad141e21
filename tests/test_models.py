"""
Unit tests for user models
"""

from enterprise_auth.models.user import (
    Membership, Profile, PENDING_ROLE_KEY, select_primary_membership
)


class TestMembershipSelection:
    """Test primary membership selection"""

    def test_flagged_membership_wins(self):
        first = Membership(org_id="org-2", role="STUDENT_L1")
        primary = Membership(org_id="org-1", role="ADMIN", is_primary=True)

        assert select_primary_membership([first, primary]) is primary

    def test_falls_back_to_first(self):
        first = Membership(org_id="org-2", role="STUDENT_L1")
        second = Membership(org_id="org-1", role="ADMIN")

        assert select_primary_membership([first, second]) is first

    def test_no_memberships(self):
        assert select_primary_membership([]) is None


class TestProfile:
    """Test Profile parsing"""

    def test_from_row(self, approved_profile_row):
        profile = Profile.from_row(approved_profile_row)

        assert profile.is_approved
        assert profile.primary_membership.effective_role_key == "ADMIN"
        assert profile.primary_membership.role_name == "Administrator"

    def test_role_key_fallbacks(self):
        assert Membership.from_row({"role": "STUDENT_L1", "roles": None}).effective_role_key == "STUDENT_L1"
        assert Membership.from_row({}).effective_role_key == PENDING_ROLE_KEY

    def test_missing_memberships(self):
        profile = Profile.from_row({"id": "user-123", "account_status": "PENDING", "memberships": None})

        assert profile.memberships == []
        assert not profile.is_approved
