"""
External service interfaces (ports).
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ...domain.entities.user import IdentityUser


class IdentityProvider(ABC):
    """Interface for the hosted identity provider."""

    @abstractmethod
    async def verify_token(self, token: str) -> Optional[str]:
        """
        Verify a session token.

        Returns:
            The token subject (user id), or None if the token is invalid
        """
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> IdentityUser:
        """
        Get a user by id.

        Raises:
            EntityNotFoundException: If the user does not exist
        """
        pass

    @abstractmethod
    async def list_users(
        self,
        limit: int = 100,
        offset: int = 0,
        order_by: str = "-created_at"
    ) -> List[IdentityUser]:
        """List users, newest first by default."""
        pass

    @abstractmethod
    async def update_user_metadata(
        self,
        user_id: str,
        public_metadata: Dict[str, Any]
    ) -> IdentityUser:
        """Replace a user's public metadata and return the updated user."""
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Delete a user."""
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None
