"""
API Router - Combines all route modules.
"""
from fastapi import APIRouter

from partnerhub import __version__

from .routes import experts, goals, matching, notifications, partnerships, preferences, tasks

# Main API router
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(preferences.router)
api_router.include_router(experts.router)
api_router.include_router(matching.router)
api_router.include_router(partnerships.router)
api_router.include_router(goals.router)
api_router.include_router(tasks.router)
api_router.include_router(notifications.router)


# Health check at API level
@api_router.get("/health")
async def health_check() -> dict:
    """API health check."""
    return {"status": "ok", "version": __version__}
