"""
Admin user management on top of the identity provider.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from ...domain.entities.user import IdentityUser, UserRole
from ...domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    BusinessRuleViolationException,
    EntityNotFoundException,
    ValidationException,
)
from ..interfaces.services import IdentityProvider

logger = logging.getLogger(__name__)

USER_LIST_LIMIT = 100


class AdminUserService:
    """
    Use cases behind the admin endpoints.

    Only callers whose public metadata role is "admin" may use them;
    authorize_admin() resolves and checks the caller.
    """

    def __init__(self, identity: IdentityProvider):
        self.identity = identity

    async def authorize_admin(self, token: Optional[str]) -> IdentityUser:
        """
        Resolve the caller of a bearer token and require the admin role.

        Raises:
            AuthenticationException: If the token is missing or invalid
            AuthorizationException: If the caller is not an admin
        """
        if not token:
            raise AuthenticationException("Unauthorized - No token provided")

        subject = await self.identity.verify_token(token)
        if not subject:
            raise AuthenticationException("Unauthorized - Invalid token")

        try:
            caller = await self.identity.get_user(subject)
        except EntityNotFoundException:
            raise AuthenticationException("Unauthorized - Invalid token")

        if not caller.is_admin:
            logger.warning(f"Non-admin user {caller.id} attempted an admin operation")
            raise AuthorizationException("Forbidden - Admins only", required_role=UserRole.ADMIN.value)
        return caller

    async def list_users(self) -> Tuple[List[IdentityUser], int]:
        users = await self.identity.list_users(limit=USER_LIST_LIMIT, order_by="-created_at")
        return users, len(users)

    async def get_user(self, user_id: str) -> IdentityUser:
        return await self.identity.get_user(user_id)

    async def update_user(
        self,
        user_id: str,
        role: Optional[str] = None,
        dashboard_access: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Merge role and dashboard access into the user's public metadata.

        Returns:
            The user's public metadata after the update
        """
        allowed_roles = {r.value for r in UserRole}
        if role is not None and role not in allowed_roles:
            raise ValidationException(
                f"Invalid role '{role}'",
                errors={'role': [f"must be one of {sorted(allowed_roles)}"]},
            )

        user = await self.identity.get_user(user_id)
        metadata = dict(user.metadata)
        if role is not None:
            metadata['role'] = role
        if dashboard_access is not None:
            metadata['dashboardAccess'] = dashboard_access

        updated = await self.identity.update_user_metadata(user_id, metadata)
        logger.info(f"Updated metadata of user {user_id}: {metadata}")
        return updated.metadata

    async def delete_user(self, caller: IdentityUser, user_id: str) -> None:
        """
        Delete a user.

        Raises:
            BusinessRuleViolationException: If admins try to delete themselves
        """
        if caller.id == user_id:
            raise BusinessRuleViolationException(
                rule='self_delete',
                message="Cannot delete your own account",
            )
        await self.identity.delete_user(user_id)
        logger.info(f"User {user_id} deleted by {caller.id}")
