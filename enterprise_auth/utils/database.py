"""
Profile Store Utilities
user_profiles and memberships access through the Supabase table API
"""

import asyncio
from typing import Any, Dict, Optional
import logging

from postgrest.exceptions import APIError

from enterprise_auth.exceptions import StoreError, UniqueViolationError

logger = logging.getLogger(__name__)

PROFILES_TABLE = "user_profiles"
MEMBERSHIPS_TABLE = "memberships"

# Profile with its memberships and each membership's role descriptor
PROFILE_WITH_MEMBERSHIPS = "*, memberships(*, roles(role_key, role_name))"

UNIQUE_VIOLATION = "23505"


def _store_error(error: APIError) -> StoreError:
    message = error.message or "Store request failed"
    if error.code == UNIQUE_VIOLATION:
        return UniqueViolationError(message, error.code)
    return StoreError(message, error.code)


class ProfileDatabase:
    """
    Database operations for profiles and memberships

    Runs under the service-role client, which bypasses row level security.
    """

    def __init__(self, client):
        self.client = client

    async def _execute(self, query):
        try:
            return await asyncio.to_thread(query.execute)
        except APIError as e:
            raise _store_error(e) from e

    async def find_profile_with_memberships(self, account_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a profile joined with memberships and roles

        Args:
            account_id: Identity provider account ID

        Returns:
            dict: Profile row with embedded memberships, or None
        """
        query = (
            self.client.table(PROFILES_TABLE)
            .select(PROFILE_WITH_MEMBERSHIPS)
            .eq("id", account_id)
            .limit(1)
        )
        response = await self._execute(query)
        return response.data[0] if response.data else None

    async def find_profile_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Get the id of the profile registered with an email

        Args:
            email: Profile email

        Returns:
            dict: {'id': ...} or None
        """
        query = self.client.table(PROFILES_TABLE).select("id").eq("email", email).limit(1)
        response = await self._execute(query)
        return response.data[0] if response.data else None

    async def insert_profile(self, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a profile row

        Args:
            profile_data: id, email, full_name, org_id, account_status

        Returns:
            dict: The inserted row

        Raises:
            UniqueViolationError: If the id or email is already taken
            StoreError: For any other failure
        """
        response = await self._execute(self.client.table(PROFILES_TABLE).insert(profile_data))
        if not response.data:
            raise StoreError("Profile insert returned no row")

        logger.info(f"Profile created with ID: {response.data[0].get('id')}")
        return response.data[0]

    async def insert_membership(self, membership_data: Dict[str, Any]):
        """Create a membership row"""
        await self._execute(self.client.table(MEMBERSHIPS_TABLE).insert(membership_data))
        logger.info(
            f"Membership created for user {membership_data.get('user_id')} "
            f"in org {membership_data.get('org_id')} as {membership_data.get('role')}"
        )

    async def delete_profile(self, profile_id: str):
        """Delete a profile row"""
        await self._execute(self.client.table(PROFILES_TABLE).delete().eq("id", profile_id))
        logger.info(f"Profile deleted: {profile_id}")
