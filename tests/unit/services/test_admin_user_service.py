"""
Unit tests for AdminUserService.
"""
import pytest

from solar_summaries.application.services.admin_user_service import AdminUserService
from solar_summaries.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    BusinessRuleViolationException,
    EntityNotFoundException,
    ValidationException,
)
from tests.factories import IdentityUserFactory


@pytest.fixture
def service(mock_identity):
    return AdminUserService(mock_identity)


@pytest.fixture
def admin():
    return IdentityUserFactory(id="user_admin", role="admin", metadata={"role": "admin"})


class TestAuthorizeAdmin:
    """Test caller resolution and the admin rule."""

    @pytest.mark.asyncio
    async def test_missing_token(self, service):
        with pytest.raises(AuthenticationException) as exc_info:
            await service.authorize_admin(None)
        assert exc_info.value.message == "Unauthorized - No token provided"

    @pytest.mark.asyncio
    async def test_invalid_token(self, service, mock_identity):
        mock_identity.verify_token.return_value = None

        with pytest.raises(AuthenticationException) as exc_info:
            await service.authorize_admin("bad-token")
        assert exc_info.value.message == "Unauthorized - Invalid token"

    @pytest.mark.asyncio
    async def test_unknown_subject(self, service, mock_identity):
        mock_identity.verify_token.return_value = "user_gone"
        mock_identity.get_user.side_effect = EntityNotFoundException("User", "user_gone")

        with pytest.raises(AuthenticationException):
            await service.authorize_admin("token")

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, service, mock_identity):
        mock_identity.verify_token.return_value = "user_1"
        mock_identity.get_user.return_value = IdentityUserFactory(id="user_1", role="user")

        with pytest.raises(AuthorizationException) as exc_info:
            await service.authorize_admin("token")
        assert exc_info.value.message == "Forbidden - Admins only"

    @pytest.mark.asyncio
    async def test_admin_allowed(self, service, mock_identity, admin):
        mock_identity.verify_token.return_value = admin.id
        mock_identity.get_user.return_value = admin

        caller = await service.authorize_admin("token")

        assert caller is admin
        mock_identity.get_user.assert_awaited_once_with(admin.id)


class TestUserManagement:
    """Test list, update and delete."""

    @pytest.mark.asyncio
    async def test_list_users_newest_first(self, service, mock_identity):
        users = IdentityUserFactory.create_batch(3)
        mock_identity.list_users.return_value = users

        result, total = await service.list_users()

        assert result == users
        assert total == 3
        mock_identity.list_users.assert_awaited_once_with(limit=100, order_by="-created_at")

    @pytest.mark.asyncio
    async def test_update_merges_metadata(self, service, mock_identity):
        user = IdentityUserFactory(id="user_1", metadata={"role": "user", "plan": "pro"})
        mock_identity.get_user.return_value = user
        mock_identity.update_user_metadata.return_value = IdentityUserFactory(
            id="user_1",
            metadata={"role": "admin", "plan": "pro", "dashboardAccess": "full"},
        )

        metadata = await service.update_user("user_1", role="admin", dashboard_access="full")

        mock_identity.update_user_metadata.assert_awaited_once_with(
            "user_1", {"role": "admin", "plan": "pro", "dashboardAccess": "full"}
        )
        assert metadata["dashboardAccess"] == "full"

    @pytest.mark.asyncio
    async def test_update_only_given_fields(self, service, mock_identity):
        mock_identity.get_user.return_value = IdentityUserFactory(id="user_1", metadata={"role": "admin"})
        mock_identity.update_user_metadata.return_value = IdentityUserFactory(id="user_1")

        await service.update_user("user_1", dashboard_access="demo")

        mock_identity.update_user_metadata.assert_awaited_once_with(
            "user_1", {"role": "admin", "dashboardAccess": "demo"}
        )

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_role(self, service, mock_identity):
        with pytest.raises(ValidationException):
            await service.update_user("user_1", role="superuser")
        mock_identity.update_user_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_user(self, service, mock_identity, admin):
        await service.delete_user(admin, "user_2")

        mock_identity.delete_user.assert_awaited_once_with("user_2")

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, service, mock_identity, admin):
        with pytest.raises(BusinessRuleViolationException) as exc_info:
            await service.delete_user(admin, admin.id)

        assert exc_info.value.message == "Cannot delete your own account"
        mock_identity.delete_user.assert_not_awaited()
