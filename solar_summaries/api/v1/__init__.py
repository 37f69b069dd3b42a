"""
API Version 1 - Route definitions.
"""
from fastapi import APIRouter

from .admin_users import router as admin_users_router
from .jobs import router as jobs_router
from .summaries import router as summaries_router

# Create main v1 router
api_router = APIRouter(prefix="/v1")

# Include all sub-routers
api_router.include_router(admin_users_router)
api_router.include_router(jobs_router)
api_router.include_router(summaries_router)

__all__ = ['api_router']
