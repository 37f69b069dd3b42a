"""
FastAPI dependency injection providers.
"""
import secrets
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..application.interfaces.repositories import SummaryStore
from ..application.interfaces.services import IdentityProvider
from ..application.services.admin_user_service import AdminUserService
from ..application.services.daily_summary_service import DailySummaryService
from ..application.services.monthly_summary_service import MonthlySummaryService
from ..config import get_settings
from ..domain.entities.user import IdentityUser
from ..domain.exceptions import AuthenticationException, AuthorizationException
from ..infrastructure.database.connection import get_db
from ..infrastructure.database.repositories import SummaryRepository
from ..infrastructure.identity import ClerkClient

settings = get_settings()

# Security scheme
bearer_scheme = HTTPBearer(auto_error=False)


# Singleton identity provider, closed on shutdown
_identity_provider: Optional[IdentityProvider] = None


def get_identity_provider() -> IdentityProvider:
    """Get identity provider instance."""
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = ClerkClient(settings.clerk)
    return _identity_provider


async def close_identity_provider() -> None:
    global _identity_provider
    if _identity_provider is not None:
        await _identity_provider.close()
        _identity_provider = None


async def get_summary_store(
    session: AsyncSession = Depends(get_db),
) -> AsyncGenerator[SummaryStore, None]:
    """Provide a summary store bound to the request's session."""
    yield SummaryRepository(session)


def get_admin_service(
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AdminUserService:
    """Get admin user service instance."""
    return AdminUserService(identity)


def get_daily_summary_service(
    store: SummaryStore = Depends(get_summary_store),
) -> DailySummaryService:
    """Get daily summary service instance."""
    return DailySummaryService(store, settings.aggregation)


def get_monthly_summary_service(
    store: SummaryStore = Depends(get_summary_store),
) -> MonthlySummaryService:
    """Get monthly summary service instance."""
    return MonthlySummaryService(store)


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: AdminUserService = Depends(get_admin_service),
) -> IdentityUser:
    """
    Get the current caller and require the admin role.

    Raises HTTPException 401 for a missing or invalid token and 403 for
    callers that are not admins.
    """
    token = credentials.credentials if credentials else None
    try:
        return await service.authorize_admin(token)
    except AuthenticationException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    except AuthorizationException as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=e.message,
        )


async def require_jobs_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    """
    Guard the job endpoints with the configured bearer token.

    Open when no jobs token is configured.
    """
    expected = settings.jobs_token
    if not expected:
        return

    token = credentials.credentials if credentials else ""
    if not secrets.compare_digest(token.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing job token",
            headers={"WWW-Authenticate": "Bearer"},
        )
