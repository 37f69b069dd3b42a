"""
Pydantic schemas for admin user endpoints.

Field names are camelCase on the wire to match the dashboard client.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class UserResponse(CamelModel):
    """User as listed in the admin panel."""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    dashboard_access: str
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


class UserListResponse(CamelModel):
    """List of users."""
    users: List[UserResponse]
    total: int


class UserUpdateRequest(CamelModel):
    """Request to update a user's role and dashboard access."""
    role: Optional[str] = Field(None, min_length=1, max_length=50)
    dashboard_access: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator('role', 'dashboard_access')
    @classmethod
    def strip_value(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return v.strip()
        return v


class UserUpdateResponse(CamelModel):
    """Result of a metadata update."""
    success: bool = True
    message: str = "User updated successfully"
    metadata: Dict[str, Any]


class MessageResponse(CamelModel):
    """Generic success response."""
    success: bool = True
    message: str
