"""
Admin user management API endpoints.
"""
from fastapi import APIRouter, Depends

from ..dependencies import get_admin_service, require_admin
from ..schemas.user_schemas import (
    MessageResponse,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
    UserUpdateResponse,
)
from ...application.services.admin_user_service import AdminUserService
from ...domain.entities.user import IdentityUser

router = APIRouter(prefix="/admin/users", tags=["Admin"])


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: IdentityUser = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service),
):
    """List users, newest first (admin only)."""
    users, total = await service.list_users()
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        total=total,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    admin: IdentityUser = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service),
):
    """Get one user (admin only)."""
    user = await service.get_user(user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserUpdateResponse)
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    admin: IdentityUser = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service),
):
    """Update a user's role and dashboard access (admin only)."""
    metadata = await service.update_user(
        user_id,
        role=request.role,
        dashboard_access=request.dashboard_access,
    )
    return UserUpdateResponse(metadata=metadata)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: IdentityUser = Depends(require_admin),
    service: AdminUserService = Depends(get_admin_service),
):
    """Delete a user (admin only). Admins cannot delete themselves."""
    await service.delete_user(admin, user_id)
    return MessageResponse(message="User deleted successfully")
