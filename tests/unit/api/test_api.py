"""
Unit tests for the HTTP API.

Dependencies are overridden with the in-memory store and a mocked
identity provider; requests go through httpx.ASGITransport.
"""
import pytest
import pytest_asyncio
from datetime import date
from httpx import ASGITransport, AsyncClient

from solar_summaries.api import dependencies
from solar_summaries.application.services.admin_user_service import AdminUserService
from solar_summaries.application.services.daily_summary_service import DailySummaryService
from solar_summaries.application.services.monthly_summary_service import MonthlySummaryService
from solar_summaries.domain.exceptions import EntityNotFoundException, IdentityProviderException
from solar_summaries.main import create_app
from tests.factories import DailySummaryFactory, IdentityUserFactory, MonthlySummaryFactory

ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}
USER_HEADERS = {"Authorization": "Bearer user-token"}


@pytest.fixture
def admin():
    return IdentityUserFactory(id="user_admin", role="admin", metadata={"role": "admin"})


@pytest.fixture
def member():
    return IdentityUserFactory(id="user_member", role="user", metadata={})


@pytest.fixture
def app(store, mock_identity, aggregation_settings, admin, member):
    tokens = {"admin-token": admin.id, "user-token": member.id}
    users = {admin.id: admin, member.id: member}

    async def verify_token(token):
        return tokens.get(token)

    async def get_user(user_id):
        if user_id not in users:
            raise EntityNotFoundException("User", user_id)
        return users[user_id]

    mock_identity.verify_token.side_effect = verify_token
    mock_identity.get_user.side_effect = get_user

    application = create_app()
    application.dependency_overrides[dependencies.get_summary_store] = lambda: store
    application.dependency_overrides[dependencies.get_admin_service] = lambda: AdminUserService(mock_identity)
    application.dependency_overrides[dependencies.get_daily_summary_service] = (
        lambda: DailySummaryService(store, aggregation_settings)
    )
    application.dependency_overrides[dependencies.get_monthly_summary_service] = (
        lambda: MonthlySummaryService(store)
    )
    return application


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestAdminAuth:
    """Test the admin guard."""

    @pytest.mark.asyncio
    async def test_no_token(self, client):
        response = await client.get("/api/v1/admin/users")

        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized - No token provided"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/v1/admin/users", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized - Invalid token"

    @pytest.mark.asyncio
    async def test_non_admin(self, client):
        response = await client.get("/api/v1/admin/users", headers=USER_HEADERS)

        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden - Admins only"


class TestAdminUsers:
    """Test admin user endpoints."""

    @pytest.mark.asyncio
    async def test_list_users(self, client, mock_identity, admin, member):
        mock_identity.list_users.return_value = [member, admin]

        response = await client.get("/api/v1/admin/users", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        first = body["users"][0]
        assert first["id"] == member.id
        assert first["firstName"] == member.first_name
        assert first["dashboardAccess"] == "demo"
        assert "lastSignInAt" in first

    @pytest.mark.asyncio
    async def test_get_user(self, client, member):
        response = await client.get(f"/api/v1/admin/users/{member.id}", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["email"] == member.email

    @pytest.mark.asyncio
    async def test_get_unknown_user(self, client):
        response = await client.get("/api/v1/admin/users/user_gone", headers=ADMIN_HEADERS)

        assert response.status_code == 404
        assert response.json()["error"] == "ENTITY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_update_user(self, client, mock_identity, member):
        mock_identity.update_user_metadata.return_value = IdentityUserFactory(
            id=member.id,
            metadata={"role": "admin", "dashboardAccess": "full"},
        )

        response = await client.patch(
            f"/api/v1/admin/users/{member.id}",
            json={"role": "admin", "dashboardAccess": "full"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "User updated successfully",
            "metadata": {"role": "admin", "dashboardAccess": "full"},
        }
        mock_identity.update_user_metadata.assert_awaited_once_with(
            member.id, {"role": "admin", "dashboardAccess": "full"}
        )

    @pytest.mark.asyncio
    async def test_update_invalid_role(self, client, member):
        response = await client.patch(
            f"/api/v1/admin/users/{member.id}",
            json={"role": "root"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_user(self, client, mock_identity, member):
        response = await client.delete(f"/api/v1/admin/users/{member.id}", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "User deleted successfully"}
        mock_identity.delete_user.assert_awaited_once_with(member.id)

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, client, mock_identity, admin):
        response = await client.delete(f"/api/v1/admin/users/{admin.id}", headers=ADMIN_HEADERS)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete your own account"
        mock_identity.delete_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_identity_provider_down(self, client, mock_identity):
        mock_identity.list_users.side_effect = IdentityProviderException("Identity provider returned 503", 503)

        response = await client.get("/api/v1/admin/users", headers=ADMIN_HEADERS)

        assert response.status_code == 502


class TestJobs:
    """Test hosted job endpoints."""

    @pytest.mark.asyncio
    async def test_monthly_job(self, client, store):
        store.add_daily([
            DailySummaryFactory(device_serial="INV-A", summary_date=date(2024, 1, 1),
                                total_generation_kwh=2.0, peak_power_kw=1.0),
            DailySummaryFactory(device_serial="INV-A", summary_date=date(2024, 1, 15),
                                total_generation_kwh=3.0, peak_power_kw=5.0),
        ])

        response = await client.post("/api/v1/jobs/monthly-summaries")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "totalInserted": 1}

    @pytest.mark.asyncio
    async def test_monthly_job_failure_is_500(self, client, store):
        store.fail_list = True

        response = await client.post("/api/v1/jobs/monthly-summaries")

        assert response.status_code == 500
        assert response.json()["ok"] is False
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_daily_job_scheduled(self, client):
        response = await client.post("/api/v1/jobs/daily-summaries")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["totalInserted"] == 0

    @pytest.mark.asyncio
    async def test_daily_job_range_dry_run(self, client, store):
        response = await client.post(
            "/api/v1/jobs/daily-summaries",
            json={"start_date": "2024-03-01", "end_date": "2024-03-03", "dry_run": True},
        )

        assert response.status_code == 200
        assert response.json()["dryRun"] is True

    @pytest.mark.asyncio
    async def test_daily_job_half_range_rejected(self, client):
        response = await client.post(
            "/api/v1/jobs/daily-summaries",
            json={"start_date": "2024-03-01"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_jobs_token_required_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(dependencies.settings, "jobs_token", "s3cret")

        denied = await client.post("/api/v1/jobs/monthly-summaries")
        allowed = await client.post(
            "/api/v1/jobs/monthly-summaries",
            headers={"Authorization": "Bearer s3cret"},
        )

        assert denied.status_code == 401
        assert allowed.status_code == 200


class TestSummaries:
    """Test dashboard read endpoints."""

    @pytest.mark.asyncio
    async def test_daily_summaries(self, client, store):
        store.add_daily([
            DailySummaryFactory(device_serial="INV-A", summary_date=date(2024, 3, d))
            for d in (1, 2, 3)
        ])

        response = await client.get(
            "/api/v1/summaries/INV-A/daily",
            params={"start": "2024-03-02", "end": "2024-03-03"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [s["summary_date"] for s in body["summaries"]] == ["2024-03-02", "2024-03-03"]

    @pytest.mark.asyncio
    async def test_daily_reversed_range(self, client):
        response = await client.get(
            "/api/v1/summaries/INV-A/daily",
            params={"start": "2024-03-05", "end": "2024-03-01"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_monthly_summaries(self, client, store):
        summary = MonthlySummaryFactory(device_serial="INV-A", summary_month="2024-02")
        store.monthly[("INV-A", "2024-02")] = summary

        response = await client.get("/api/v1/summaries/INV-A/monthly")

        assert response.status_code == 200
        assert response.json()["summaries"][0]["summary_month"] == "2024-02"

    @pytest.mark.asyncio
    async def test_monthly_bad_month_format(self, client):
        response = await client.get("/api/v1/summaries/INV-A/monthly", params={"start": "2024-13"})

        assert response.status_code == 422


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_without_database(self, client, monkeypatch):
        from solar_summaries import main

        monkeypatch.setattr(main.settings.database, "dsn", None)
        monkeypatch.setattr(main.settings.database, "password", None)

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
