"""
Identity user entity as exposed to the admin API.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class UserRole(str, Enum):
    """Roles stored in the identity provider's public metadata."""
    ADMIN = "admin"
    USER = "user"


DEFAULT_ROLE = UserRole.USER.value
DEFAULT_DASHBOARD_ACCESS = "demo"


@dataclass
class IdentityUser:
    """
    A user held by the identity provider.

    role and dashboard_access are read from public metadata and fall back
    to "user" and "demo".
    """
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str = DEFAULT_ROLE
    dashboard_access: str = DEFAULT_DASHBOARD_ACCESS
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
